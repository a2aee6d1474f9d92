"""
protometta Interpreter

This module implements the MeTTa evaluator: a fixed set of special forms and
built-in operators on top of rule reduction, with non-deterministic
semantics. Every evaluation returns a list of result atoms.
"""

from typing import Callable, Dict, List, Optional, TextIO
import functools
import logging
import math
import sys

from .bindings import Bindings
from .config import InterpreterConfig
from .core import (
    Atom, Empty, Error, Expression, Grounded, Symbol, Variable,
    EMPTY, bool_symbol, to_metta,
)
from .matcher import match
from .parser import ParseError, parse
from .prelude import STDLIB
from .space import Rule, Space

logger = logging.getLogger(__name__)


def is_truthy(atom: Atom) -> bool:
    """
    Truthiness used by ``if``, ``not``, ``and`` and ``or``.

    Symbols are truthy unless named False or Nil. Grounded booleans are their
    value, numbers are truthy when nonzero and strings when non-empty. Empty
    and Error are falsy; every other atom is truthy.
    """
    if isinstance(atom, Symbol):
        return atom.name not in ("False", "Nil")
    elif isinstance(atom, Grounded):
        if atom.is_bool:
            return atom.value
        elif atom.is_numeric:
            return atom.value != 0
        elif isinstance(atom.value, str):
            return atom.value != ""
        return True
    elif isinstance(atom, (Empty, Error)):
        return False
    return True


def _number(atom: Atom) -> Optional[float]:
    if isinstance(atom, Grounded):
        return atom.as_float()
    return None


class Interpreter:
    """
    MeTTa interpreter owning a registry of named spaces.

    Features:
    - Special forms (match, let, let*, if, case, quote, unquote, collapse,
      superpose, =, add-atom, remove-atom, get-atoms)
    - Arithmetic, comparison and logical builtins
    - Rule reduction for every other expression
    - Step-bounded reduction and depth-bounded evaluation
    """

    def __init__(self, max_steps: int = 1000, max_depth: int = 200, trace: bool = False,
                 default_space: str = "default"):
        self.max_steps = max_steps
        self.max_depth = max_depth
        self.trace = trace
        self._spaces: Dict[str, Space] = {default_space: Space(default_space)}
        self._current = self._spaces[default_space]
        self._stdlib_loaded = False

        self.special_forms: Dict[str, Callable[[Expression, Space, int], List[Atom]]] = {
            'match': self._eval_match,
            'let': self._eval_let,
            'let*': self._eval_let_star,
            'if': self._eval_if,
            'case': self._eval_case,
            'quote': self._eval_quote,
            'unquote': self._eval_unquote,
            'collapse': self._eval_collapse,
            'superpose': self._eval_superpose,
            '=': self._eval_rule_definition,
            'add-atom': self._eval_add_atom,
            'remove-atom': self._eval_remove_atom,
            'get-atoms': self._eval_get_atoms,
        }

        # Built-in operations
        self.arithmetic = {
            '+': lambda a, b: a + b,
            '-': lambda a, b: a - b,
            '*': lambda a, b: a * b,
            '/': lambda a, b: a / b,
        }
        self.comparisons = {
            '==': lambda a, b: a == b,
            '<': lambda a, b: a < b,
            '>': lambda a, b: a > b,
            '<=': lambda a, b: a <= b,
            # Compares the right operand with itself, matching the reference behaviour
            '>=': lambda a, b: b >= b,
        }
        self.logical = {'and', 'or', 'not'}

    @classmethod
    def from_config(cls, config: InterpreterConfig) -> 'Interpreter':
        interpreter = cls(
            max_steps=config.max_reduction_steps,
            max_depth=config.max_depth,
            trace=config.enable_trace,
            default_space=config.default_space_name,
        )
        if config.load_stdlib:
            interpreter.load_stdlib()
        return interpreter

    # Space registry

    @property
    def space(self) -> Space:
        """The current space."""
        return self._current

    @property
    def spaces(self) -> List[str]:
        return list(self._spaces)

    def get_space(self, name: str) -> Optional[Space]:
        return self._spaces.get(name)

    def use_space(self, name: str) -> Space:
        """Switch to the named space, creating it if needed."""
        if name not in self._spaces:
            self._spaces[name] = Space(name)
            logger.debug(f"Created space '{name}'")
        self._current = self._spaces[name]
        return self._current

    # Programmatic entry points

    def load_stdlib(self) -> None:
        if self._stdlib_loaded:
            return
        self.run(STDLIB)
        self._stdlib_loaded = True
        logger.info(f"Loaded standard library into space '{self._current.name}'")

    def run(self, code: str) -> List[Atom]:
        """
        Parse ``code`` and interpret every top-level form.

        Raises:
            ParseError: If the code is malformed
        """
        results = []
        for atom in parse(code):
            results.extend(self.interpret(atom))
        return results

    def eval(self, code: str) -> Optional[Atom]:
        results = self.run(code)
        return results[0] if results else None

    def add(self, code: str) -> None:
        """Parse ``code`` and insert every atom into the current space unevaluated."""
        for atom in parse(code):
            self._current.add(atom)

    def add_atom(self, atom: Atom) -> bool:
        return self._current.add(atom)

    def query(self, pattern: str) -> List[Bindings]:
        atoms = parse(pattern)
        if not atoms:
            return []
        return self._current.query(atoms[0])

    def repl(self, input_stream: TextIO = None, output: TextIO = None) -> None:
        """Read-eval-print loop. Typing ``exit`` (or end of input) quits."""
        input_stream = input_stream or sys.stdin
        output = output or sys.stdout

        print("MeTTa REPL", file=output)
        print("Type 'exit' to quit", file=output)
        while True:
            output.write("metta> ")
            output.flush()
            line = input_stream.readline()
            if not line or line.strip() == "exit":
                break
            if not line.strip():
                continue
            try:
                for result in self.run(line):
                    print(f"=> {to_metta(result)}", file=output)
            except ParseError as e:
                print(f"Error: {e}", file=output)
            except Exception as e:
                logger.debug("REPL evaluation failed", exc_info=True)
                print(f"Error: {e}", file=output)

    # Evaluation

    def interpret(self, atom: Atom, space: Optional[Space] = None) -> List[Atom]:
        """
        Evaluate an atom.

        Args:
            atom: The atom to evaluate
            space: Space to evaluate against (defaults to the current space)

        Returns:
            Every result of the evaluation, possibly none
        """
        return self._interpret(atom, space if space is not None else self._current, 0)

    def _interpret(self, atom: Atom, space: Space, depth: int) -> List[Atom]:
        if depth > self.max_depth:
            return [self._depth_error(atom)]
        try:
            return self._dispatch(atom, space, depth)
        except RecursionError:
            # Deep atoms can exhaust the Python stack before max_depth is reached
            return [self._depth_error(atom)]

    def _depth_error(self, atom: Atom) -> Error:
        return Error(f"maximum evaluation depth exceeded: {self.max_depth}", atom)

    def _dispatch(self, atom: Atom, space: Space, depth: int) -> List[Atom]:
        if self.trace:
            logger.debug(f"{'  ' * depth}eval {to_metta(atom)}")

        if isinstance(atom, Variable):
            bindings_list = space.query(atom)
            if bindings_list:
                return [bindings_list[0].apply(atom)]
            return [atom]

        if not isinstance(atom, Expression) or atom.arity == 0:
            return [atom]

        head = atom.head
        if isinstance(head, Symbol):
            name = head.name
            if name in self.special_forms:
                return self.special_forms[name](atom, space, depth)
            elif name in self.arithmetic:
                return self._eval_arithmetic(atom, space, depth)
            elif name in self.comparisons:
                return self._eval_comparison(atom, space, depth)
            elif name in self.logical:
                return self._eval_logical(atom, space, depth)
            return self._reduce(atom, space, depth)

        # Computed head: evaluate it and re-apply each result
        results = []
        for new_head in self._interpret(head, space, depth + 1):
            applied = Expression((new_head,) + atom.tail)
            if new_head == head:
                results.extend(self._reduce(applied, space, depth))
            else:
                results.extend(self._interpret(applied, space, depth + 1))
        return results

    def _reduce(self, atom: Atom, space: Space, depth: int) -> List[Atom]:
        reduced = space.reduce(atom, self.max_steps)
        if reduced == atom:
            return [atom]
        if self.trace:
            logger.debug(f"{'  ' * depth}rewrote {to_metta(atom)} -> {to_metta(reduced)}")
        return self._interpret(reduced, space, depth + 1)

    def _resolve_space(self, ref: Atom, space: Space) -> Optional[Space]:
        if isinstance(ref, Symbol):
            if ref.name == '&self':
                return space
            if ref.name.startswith('&'):
                return self.get_space(ref.name[1:])
        return None

    @staticmethod
    def _arity_error(expr: Expression, description: str) -> List[Atom]:
        return [Error(f"{expr.head.name} requires {description}", expr)]

    # Special forms

    def _eval_match(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 4:
            return self._arity_error(expr, "3 arguments: space, pattern, template")
        _, space_ref, pattern, template = expr.children
        target = self._resolve_space(space_ref, space)
        if target is None:
            return [Error(f"Unknown space: {to_metta(space_ref)}", expr)]

        bindings_list = target.query(pattern)
        if not bindings_list:
            return [EMPTY]
        return [bindings.apply(template) for bindings in bindings_list]

    def _eval_let(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 4:
            return self._arity_error(expr, "3 arguments: variable, value, body")
        _, variable, value_expr, body = expr.children
        if not isinstance(variable, Variable):
            return [Error("let first argument must be a variable", expr)]

        results = []
        for value in self._interpret(value_expr, space, depth + 1):
            bindings = Bindings({variable.name: value})
            results.extend(self._interpret(bindings.apply(body), space, depth + 1))
        return results or [EMPTY]

    def _eval_let_star(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 3:
            return self._arity_error(expr, "2 arguments: bindings, body")
        _, pairs, body = expr.children
        if not isinstance(pairs, Expression):
            return [Error("let* bindings must be an expression", expr)]

        branches = [Bindings()]
        for pair in pairs.children:
            if not (isinstance(pair, Expression) and pair.arity == 2 and isinstance(pair[0], Variable)):
                return [Error("let* binding must be a (variable value) pair", pair)]
            variable, value_expr = pair.children
            next_branches = []
            for bindings in branches:
                for value in self._interpret(bindings.apply(value_expr), space, depth + 1):
                    # Later pairs shadow earlier bindings of the same variable
                    extended = bindings.to_dict()
                    extended[variable.name] = value
                    next_branches.append(Bindings(extended))
            branches = next_branches

        results = []
        for bindings in branches:
            results.extend(self._interpret(bindings.apply(body), space, depth + 1))
        return results or [EMPTY]

    def _eval_if(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 4:
            return self._arity_error(expr, "3 arguments: condition, then, else")
        _, condition, then_branch, else_branch = expr.children

        results = []
        for cond in self._interpret(condition, space, depth + 1):
            branch = then_branch if is_truthy(cond) else else_branch
            results.extend(self._interpret(branch, space, depth + 1))
        return results or [EMPTY]

    def _eval_case(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity < 3:
            return self._arity_error(expr, "a scrutinee and at least one clause")
        scrutinee = expr[1]
        clauses = expr.children[2:]
        for clause in clauses:
            if not (isinstance(clause, Expression) and clause.arity == 2):
                return [Error("case clause must be (pattern body)", clause)]

        results = []
        for value in self._interpret(scrutinee, space, depth + 1):
            for pattern, body in clauses:
                bindings = match(value, pattern)
                if bindings is not None:
                    results.extend(self._interpret(bindings.apply(body), space, depth + 1))
                    break
        return results or [EMPTY]

    def _eval_quote(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 2:
            return self._arity_error(expr, "1 argument")
        return [expr[1]]

    def _eval_unquote(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 2:
            return self._arity_error(expr, "1 argument")
        results = []
        for value in self._interpret(expr[1], space, depth + 1):
            results.extend(self._interpret(value, space, depth + 1))
        return results

    def _eval_collapse(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 2:
            return self._arity_error(expr, "1 argument")
        return [Expression(self._interpret(expr[1], space, depth + 1))]

    def _eval_superpose(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 2:
            return self._arity_error(expr, "1 argument")
        alternatives = expr[1]
        if not isinstance(alternatives, Expression):
            return [EMPTY]
        results = []
        for child in alternatives.children:
            results.extend(self._interpret(child, space, depth + 1))
        return results

    def _eval_rule_definition(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 3:
            return self._arity_error(expr, "2 arguments: pattern, template")
        _, pattern, template = expr.children
        space.add_rule(Rule(f"user-rule-{len(space.rules)}", pattern, template))
        return [EMPTY]

    def _eval_add_atom(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 3:
            return self._arity_error(expr, "2 arguments: space, atom")
        target = self._resolve_space(expr[1], space)
        if target is None:
            return [Error(f"Unknown space: {to_metta(expr[1])}", expr)]
        target.add(expr[2])
        return [EMPTY]

    def _eval_remove_atom(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 3:
            return self._arity_error(expr, "2 arguments: space, atom")
        target = self._resolve_space(expr[1], space)
        if target is None:
            return [Error(f"Unknown space: {to_metta(expr[1])}", expr)]
        target.remove(expr[2])
        return [EMPTY]

    def _eval_get_atoms(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity > 2:
            return self._arity_error(expr, "at most 1 argument: space")
        target = self._resolve_space(expr[1], space) if expr.arity == 2 else space
        if target is None:
            return [Error(f"Unknown space: {to_metta(expr[1])}", expr)]
        return [Expression(target.atoms)]

    # Builtins

    def _eval_arithmetic(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        op_name = expr.head.name
        args = []
        for arg in expr.tail:
            args.extend(self._interpret(arg, space, depth + 1))

        try:
            numbers = [_number(arg) for arg in args]
        except OverflowError:
            return [Error("Numeric overflow", expr)]
        if any(n is None for n in numbers):
            return [Error("Arithmetic requires numeric arguments", expr)]

        fold = self.arithmetic[op_name]
        if op_name == '+':
            result = functools.reduce(fold, numbers, 0.0)
        elif op_name == '*':
            result = functools.reduce(fold, numbers, 1.0)
        elif op_name == '-':
            if not numbers:
                return self._arity_error(expr, "at least 1 argument")
            if len(numbers) == 1:
                result = -numbers[0]
            else:
                result = functools.reduce(fold, numbers[1:], numbers[0])
        else:
            if len(numbers) < 2:
                return self._arity_error(expr, "at least 2 arguments")
            if any(n == 0 for n in numbers[1:]):
                return [Error("Division by zero", expr)]
            result = functools.reduce(fold, numbers[1:], numbers[0])

        if not math.isfinite(result):
            return [Error("Numeric overflow", expr)]
        return [Grounded(float(result))]

    def _eval_comparison(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        if expr.arity != 3:
            return self._arity_error(expr, "2 arguments")
        op_name = expr.head.name
        compare = self.comparisons[op_name]
        left_results = self._interpret(expr[1], space, depth + 1)
        right_results = self._interpret(expr[2], space, depth + 1)

        results = []
        for left in left_results:
            for right in right_results:
                try:
                    left_val, right_val = _number(left), _number(right)
                except OverflowError:
                    return [Error("Numeric overflow", expr)]
                if left_val is not None and right_val is not None:
                    results.append(bool_symbol(compare(left_val, right_val)))
                elif op_name == '==':
                    results.append(bool_symbol(left == right))
        return results or [Error("Comparison failed", expr)]

    def _eval_logical(self, expr: Expression, space: Space, depth: int) -> List[Atom]:
        op_name = expr.head.name
        if op_name == 'not':
            if expr.arity != 2:
                return self._arity_error(expr, "1 argument")
            return [bool_symbol(not is_truthy(value))
                    for value in self._interpret(expr[1], space, depth + 1)]

        # Every argument is evaluated; no short-circuiting
        values = []
        for arg in expr.tail:
            values.extend(self._interpret(arg, space, depth + 1))
        if op_name == 'and':
            return [bool_symbol(all(is_truthy(v) for v in values))]
        return [bool_symbol(any(is_truthy(v) for v in values))]
