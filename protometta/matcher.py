"""
protometta Pattern Matcher

One-directional matching of data against patterns, and two-directional
unification. All functions are pure: the bindings passed in are never
modified, successful calls return a fresh Bindings.
"""

from typing import Iterable, List, Optional

from .bindings import Bindings
from .core import Atom, Empty, Error, Expression, Grounded, Symbol, Variable


def _match_into(atom: Atom, pattern: Atom, bindings: Bindings) -> bool:
    if isinstance(pattern, Variable):
        return bindings.bind(pattern.name, atom)

    elif isinstance(pattern, Expression):
        if not isinstance(atom, Expression) or atom.arity != pattern.arity:
            return False
        for child, pattern_child in zip(atom.children, pattern.children):
            if not _match_into(child, pattern_child, bindings):
                return False
        return True

    elif isinstance(pattern, (Symbol, Grounded, Error)):
        return atom == pattern

    elif isinstance(pattern, Empty):
        return isinstance(atom, Empty)

    return False


def match(atom: Atom, pattern: Atom, bindings: Optional[Bindings] = None) -> Optional[Bindings]:
    """
    Match ground data against a pattern that may contain variables.

    Args:
        atom: The (already evaluated) data atom
        pattern: The pattern; only its variables get bound
        bindings: Bindings to extend (left untouched)

    Returns:
        The extended bindings, or None if the atom does not match
    """
    result = bindings.copy() if bindings is not None else Bindings()
    if _match_into(atom, pattern, result):
        return result
    return None


def match_all(atoms: Iterable[Atom], pattern: Atom) -> List[Bindings]:
    """Match every atom independently, keeping the successful bindings in order."""
    results = []
    for atom in atoms:
        bindings = match(atom, pattern)
        if bindings is not None:
            results.append(bindings)
    return results


def _unify_into(atom1: Atom, atom2: Atom, bindings: Bindings) -> bool:
    a1 = bindings.apply(atom1)
    a2 = bindings.apply(atom2)

    if isinstance(a1, Variable) and isinstance(a2, Variable) and a1.name == a2.name:
        return True
    elif isinstance(a1, Variable):
        return bindings.bind(a1.name, a2)
    elif isinstance(a2, Variable):
        return bindings.bind(a2.name, a1)

    elif isinstance(a1, Expression) and isinstance(a2, Expression):
        if a1.arity != a2.arity:
            return False
        for c1, c2 in zip(a1.children, a2.children):
            if not _unify_into(c1, c2, bindings):
                return False
        return True

    elif isinstance(a1, Symbol) and isinstance(a2, Symbol):
        return a1.name == a2.name

    elif isinstance(a1, Grounded) and isinstance(a2, Grounded):
        return a1 == a2

    return False


def unify(atom1: Atom, atom2: Atom, bindings: Optional[Bindings] = None) -> Optional[Bindings]:
    """
    Unify two atoms, either of which may contain variables.

    Args:
        atom1: First atom
        atom2: Second atom
        bindings: Bindings to extend (left untouched)

    Returns:
        Bindings making both sides equal under substitution, or None
    """
    result = bindings.copy() if bindings is not None else Bindings()
    if _unify_into(atom1, atom2, result):
        return result
    return None
