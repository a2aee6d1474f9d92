"""
protometta Bindings

A substitution environment mapping variable names to atoms, built up during a
single match or unify attempt.
"""

from typing import Dict, Iterator, Optional, Tuple

from .core import Atom, Expression, Variable, to_metta


class Bindings:
    """
    Variable name to atom mapping with consistency checking.

    A name is bound at most once; binding it again succeeds only when the new
    atom equals the existing one.
    """

    def __init__(self, bindings: Optional[Dict[str, Atom]] = None):
        self._bindings: Dict[str, Atom] = dict(bindings) if bindings else {}

    def bind(self, name: str, value: Atom) -> bool:
        existing = self._bindings.get(name)
        if existing is not None:
            return existing == value
        self._bindings[name] = value
        return True

    def get(self, name: str) -> Optional[Atom]:
        return self._bindings.get(name)

    def __getitem__(self, name: str) -> Atom:
        return self._bindings[name]

    def has(self, name: str) -> bool:
        return name in self._bindings

    __contains__ = has

    def merge(self, other: 'Bindings') -> Optional['Bindings']:
        """
        Combine two bindings.

        Returns:
            A new Bindings holding both sets of names, or None when the two
            disagree on a shared name
        """
        merged = self.copy()
        for name, value in other.items():
            if not merged.bind(name, value):
                return None
        return merged

    def apply(self, atom: Atom) -> Atom:
        """Substitute bound variables in ``atom`` (one level, no chasing)."""
        if isinstance(atom, Variable):
            return self._bindings.get(atom.name, atom)
        elif isinstance(atom, Expression):
            return Expression(tuple(self.apply(child) for child in atom.children))
        return atom

    def copy(self) -> 'Bindings':
        return Bindings(self._bindings)

    def items(self) -> Iterator[Tuple[str, Atom]]:
        return iter(list(self._bindings.items()))

    def to_dict(self) -> Dict[str, Atom]:
        return dict(self._bindings)

    def __len__(self):
        return len(self._bindings)

    def __bool__(self):
        # An empty Bindings is still a successful match
        return True

    def is_empty(self) -> bool:
        return not self._bindings

    def __eq__(self, other):
        if not isinstance(other, Bindings):
            return NotImplemented
        return self._bindings == other._bindings

    def __str__(self) -> str:
        return ", ".join(f"${name} = {to_metta(value)}" for name, value in self._bindings.items())

    def __repr__(self) -> str:
        return f"Bindings({{{self}}})"
