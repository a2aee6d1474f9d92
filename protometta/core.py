"""
protometta Core Atom Model

This module implements the atom data model of the MeTTa rewriting language:
symbols, pattern variables, grounded host values, expressions, and the two
distinguished result atoms Empty and Error.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional, Tuple, Union

import numpy as np


class AtomType(Enum):
    """Tag identifying the syntactic category of an atom."""
    SYMBOL = "Symbol"
    VARIABLE = "Variable"
    GROUNDED = "Grounded"
    EXPRESSION = "Expression"
    EMPTY = "Empty"
    ERROR = "Error"


class Atom:
    """
    Base class for every value of the language.

    Atoms are immutable. Code that needs to distinguish the categories
    dispatches on the concrete class (or on ``atom_type``) rather than
    relying on overridden behaviour.
    """

    __slots__ = ()
    atom_type: AtomType

    def is_variable(self) -> bool:
        return self.atom_type is AtomType.VARIABLE

    def is_symbol(self) -> bool:
        return self.atom_type is AtomType.SYMBOL

    def is_grounded(self) -> bool:
        return self.atom_type is AtomType.GROUNDED

    def is_expression(self) -> bool:
        return self.atom_type is AtomType.EXPRESSION

    def __str__(self) -> str:
        return to_metta(self)


@dataclass(frozen=True)
class Symbol(Atom):
    name: str
    atom_type = AtomType.SYMBOL


@dataclass(frozen=True)
class Variable(Atom):
    name: str
    type_constraint: Optional[Atom] = field(default=None, compare=False)
    atom_type = AtomType.VARIABLE


# Host types accepted as grounded values, mapped to their value_type tag
_GROUNDED_TAGS = ((bool, "Bool"), (int, "Number"), (float, "Float"), (str, "String"))


def _unwrap_host_value(value: Any) -> Any:
    """Convert numpy scalars to the equivalent Python primitive."""
    if isinstance(value, np.generic):
        return value.item()
    return value


@dataclass(frozen=True, eq=False)
class Grounded(Atom):
    """
    A host-level primitive wrapped as an atom.

    The ``value_type`` tag is derived from the value when omitted: ``Number``
    for integers, ``Float`` for floats, ``String`` and ``Bool``.
    """
    value: Union[int, float, str, bool]
    value_type: str = ""
    atom_type = AtomType.GROUNDED

    def __post_init__(self):
        value = _unwrap_host_value(self.value)
        object.__setattr__(self, 'value', value)
        if not self.value_type:
            for host_type, tag in _GROUNDED_TAGS:
                if isinstance(value, host_type):
                    object.__setattr__(self, 'value_type', tag)
                    break
            else:
                raise TypeError(f"Unsupported grounded value: {value!r}")

    @property
    def is_bool(self) -> bool:
        return isinstance(self.value, bool)

    @property
    def is_numeric(self) -> bool:
        return isinstance(self.value, (int, float)) and not self.is_bool

    def as_float(self) -> Optional[float]:
        return float(self.value) if self.is_numeric else None

    def as_int(self) -> Optional[int]:
        if isinstance(self.value, int) and not self.is_bool:
            return self.value
        return None

    def as_string(self) -> Optional[str]:
        return self.value if isinstance(self.value, str) else None

    def as_bool(self) -> Optional[bool]:
        return self.value if self.is_bool else None

    def __eq__(self, other):
        if not isinstance(other, Grounded):
            return NotImplemented
        # bool is an int subclass; keep True distinct from 1
        if self.is_bool != other.is_bool:
            return False
        return self.value == other.value

    def __hash__(self):
        return hash((Grounded, self.is_bool, self.value))


@dataclass(frozen=True)
class Expression(Atom):
    """A compound term. Its arity is fixed when it is built."""
    children: Tuple[Atom, ...] = ()
    atom_type = AtomType.EXPRESSION

    def __post_init__(self):
        object.__setattr__(self, 'children', tuple(self.children))

    @property
    def arity(self) -> int:
        return len(self.children)

    @property
    def head(self) -> Optional[Atom]:
        return self.children[0] if self.children else None

    @property
    def tail(self) -> Tuple[Atom, ...]:
        return self.children[1:]

    def __len__(self):
        return len(self.children)

    def __getitem__(self, index):
        return self.children[index]

    def __iter__(self):
        return iter(self.children)


@dataclass(frozen=True)
class Empty(Atom):
    """The canonical "no value" result."""
    atom_type = AtomType.EMPTY


@dataclass(frozen=True)
class Error(Atom):
    """A failure represented as a value. Equality ignores the source."""
    message: str
    source: Optional[Atom] = field(default=None, compare=False)
    atom_type = AtomType.ERROR


EMPTY = Empty()
TRUE = Symbol("True")
FALSE = Symbol("False")


# Helper functions for creating atoms
def sym(name: str) -> Symbol:
    """Create a symbol atom."""
    return Symbol(name)

def var(name: str, type_constraint: Optional[Atom] = None) -> Variable:
    """Create a pattern variable."""
    return Variable(name, type_constraint)

def gnd(value: Any) -> Grounded:
    """Wrap a host value as a grounded atom."""
    return Grounded(value)

def expr(*children: Atom) -> Expression:
    """Create an expression from its children."""
    return Expression(children)

def bool_symbol(value: bool) -> Symbol:
    return TRUE if value else FALSE


def _escape_string(text: str) -> str:
    return (text.replace('\\', '\\\\').replace('"', '\\"')
            .replace('\n', '\\n').replace('\t', '\\t'))


def to_metta(atom: Atom) -> str:
    """
    Render an atom back into MeTTa surface syntax.

    Args:
        atom: The atom to render

    Returns:
        The source text that parses back to an equal atom (Empty and Error
        atoms have no literal syntax and render in their display form, and
        non-finite floats render as inf or nan)
    """
    if isinstance(atom, Symbol):
        return atom.name

    elif isinstance(atom, Variable):
        if atom.type_constraint is not None:
            return f"(: ${atom.name} {to_metta(atom.type_constraint)})"
        return f"${atom.name}"

    elif isinstance(atom, Grounded):
        if atom.value_type == "String":
            return f'"{_escape_string(atom.value)}"'
        elif atom.value_type == "Bool":
            return 'true' if atom.value else 'false'
        elif atom.value_type == "Float":
            # Positional notation; the parser has no exponent syntax
            return np.format_float_positional(atom.value, trim='0')
        return repr(atom.value)

    elif isinstance(atom, Expression):
        return "(" + " ".join(to_metta(child) for child in atom.children) + ")"

    elif isinstance(atom, Empty):
        return "()"

    elif isinstance(atom, Error):
        message = _escape_string(atom.message)
        if atom.source is not None:
            return f'(Error {to_metta(atom.source)} "{message}")'
        return f'(Error "{message}")'

    else:
        raise TypeError(f"Not an atom: {atom!r}")


def iter_atoms(atom: Atom) -> Iterator[Tuple[Optional[Expression], Optional[int], Atom]]:
    """
    Yield (parent, child_idx, atom) for every atom in a tree, depth first.

    The root is yielded with parent and index set to None.
    """
    def _traverse(node: Atom, parent: Optional[Expression] = None, child_idx: Optional[int] = None):
        yield (parent, child_idx, node)
        if isinstance(node, Expression):
            for idx, child in enumerate(node.children):
                yield from _traverse(child, node, idx)

    yield from _traverse(atom)


def atom_depth(atom: Atom) -> int:
    """Nesting depth of an atom; leaves have depth 1."""
    if isinstance(atom, Expression) and atom.children:
        return 1 + max(atom_depth(child) for child in atom.children)
    return 1
