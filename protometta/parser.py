"""
protometta Parser

Turns MeTTa surface text into atoms. Malformed input raises ParseError;
it is never turned into an Error atom.
"""

import math
from typing import List

from .core import Atom, Expression, Grounded, Symbol, Variable

_DELIMITERS = frozenset('()";')
_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '"': '"', '\\': '\\'}

# Deepest expression nesting accepted in source text
MAX_NESTING = 200


class ParseError(ValueError):
    """Raised when source text is not well-formed MeTTa."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at position {position}")
        self.position = position


class Parser:
    """
    Recursive-descent parser over a single source string.

    Grammar:
        atom       := expression | string | variable | number | symbol
        expression := '(' atom* ')'
        variable   := '$' name
        number     := '-'? digit+ ('.' digit*)?
    Whitespace and ';' comments running to end of line separate atoms.
    """

    def __init__(self, text: str, max_nesting: int = MAX_NESTING):
        self.text = text
        self.pos = 0
        self.max_nesting = max_nesting
        self._nesting = 0

    def parse(self) -> List[Atom]:
        atoms = []
        while True:
            self._skip_whitespace_and_comments()
            if self.pos >= len(self.text):
                break
            atoms.append(self.parse_atom())
        return atoms

    def parse_atom(self) -> Atom:
        self._skip_whitespace_and_comments()
        if self.pos >= len(self.text):
            raise ParseError("Unexpected end of input", self.pos)

        char = self.text[self.pos]
        if char == '(':
            return self._parse_expression()
        elif char == '"':
            return self._parse_string()
        elif char == '$':
            return self._parse_variable()
        elif char == ')':
            raise ParseError("Unexpected ')'", self.pos)
        elif self._starts_number():
            return self._parse_number()
        return Symbol(self._read_name())

    def _parse_expression(self) -> Expression:
        start = self.pos
        if self._nesting >= self.max_nesting:
            raise ParseError(f"Expression nesting deeper than {self.max_nesting}", start)
        self._nesting += 1
        self.pos += 1
        children = []
        while True:
            self._skip_whitespace_and_comments()
            if self.pos >= len(self.text):
                raise ParseError("Unmatched '('", start)
            if self.text[self.pos] == ')':
                self.pos += 1
                self._nesting -= 1
                return Expression(children)
            children.append(self.parse_atom())

    def _parse_variable(self) -> Variable:
        start = self.pos
        self.pos += 1
        name = self._read_name()
        if not name:
            raise ParseError("Variable name expected after '$'", start)
        return Variable(name)

    def _parse_string(self) -> Grounded:
        start = self.pos
        self.pos += 1
        chars = []
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == '\\':
                if self.pos + 1 >= len(self.text):
                    break
                escaped = self.text[self.pos + 1]
                chars.append(_ESCAPES.get(escaped, escaped))
                self.pos += 2
            elif char == '"':
                self.pos += 1
                return Grounded(''.join(chars))
            else:
                chars.append(char)
                self.pos += 1
        raise ParseError("Unterminated string literal", start)

    def _parse_number(self) -> Grounded:
        start = self.pos
        if self.text[self.pos] == '-':
            self.pos += 1
        has_dot = False
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char.isdigit():
                self.pos += 1
            elif char == '.' and not has_dot:
                has_dot = True
                self.pos += 1
            else:
                break

        if self.pos < len(self.text) and not self._is_delimiter(self.text[self.pos]):
            raise ParseError(f"Unexpected character {self.text[self.pos]!r} in number", self.pos)

        literal = self.text[start:self.pos]
        try:
            if not has_dot:
                return Grounded(int(literal))
            value = float(literal)
        except ValueError as e:
            raise ParseError(f"Invalid number literal: {e}", start) from e
        if not math.isfinite(value):
            raise ParseError("Number literal out of range", start)
        return Grounded(value)

    def _starts_number(self) -> bool:
        char = self.text[self.pos]
        if char.isdigit():
            return True
        return (char == '-' and self.pos + 1 < len(self.text)
                and self.text[self.pos + 1].isdigit())

    def _read_name(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and not self._is_delimiter(self.text[self.pos]):
            self.pos += 1
        return self.text[start:self.pos]

    @staticmethod
    def _is_delimiter(char: str) -> bool:
        return char.isspace() or char in _DELIMITERS

    def _skip_whitespace_and_comments(self):
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char.isspace():
                self.pos += 1
            elif char == ';':
                while self.pos < len(self.text) and self.text[self.pos] != '\n':
                    self.pos += 1
            else:
                break


def parse(text: str) -> List[Atom]:
    """
    Parse MeTTa source text into a list of top-level atoms.

    Args:
        text: Source code

    Returns:
        The parsed atoms in source order

    Raises:
        ParseError: On unmatched parentheses, unterminated strings,
            unexpected characters, out-of-range numbers or nesting deeper
            than MAX_NESTING
    """
    return Parser(text).parse()
