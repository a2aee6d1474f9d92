"""
protometta: a small MeTTa hypergraph rewriting language interpreter.

This package implements the MeTTa atom model, a parser for its surface
syntax, pattern matching and unification, rule spaces with reduction, and
a non-deterministic interpreter with built-in special forms.
"""

from .core import (
    Atom, AtomType, Symbol, Variable, Grounded, Expression, Empty, Error,
    EMPTY, sym, var, gnd, expr, to_metta, iter_atoms,
)
from .parser import ParseError, parse
from .bindings import Bindings
from .matcher import match, match_all, unify
from .space import Rule, Space
from .reducer import reduce
from .interpreter import Interpreter, is_truthy
from .integration import MettaIntegration, AtomSpaceBridge, create_default_integration, create_integration
from .verify import verify_atoms

__version__ = "0.3.0"
__all__ = [
    "Atom", "AtomType", "Symbol", "Variable", "Grounded", "Expression", "Empty", "Error",
    "EMPTY", "sym", "var", "gnd", "expr", "to_metta", "iter_atoms",
    "ParseError", "parse", "Bindings", "match", "match_all", "unify",
    "Rule", "Space", "reduce", "Interpreter", "is_truthy",
    "MettaIntegration", "AtomSpaceBridge", "create_default_integration", "create_integration",
    "verify_atoms",
]
