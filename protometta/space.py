"""
protometta Space

A Space is the knowledge base evaluation runs against: an insertion-ordered,
duplicate-free collection of atoms together with a priority-ordered list of
rewrite rules. It is the only mutable state of the core.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
import logging

from .bindings import Bindings
from .core import Atom, to_metta
from .matcher import match, match_all
from .reducer import reduce

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rule:
    """A rewrite rule: atoms matching ``pattern`` rewrite to ``template``."""
    name: str
    pattern: Atom
    template: Atom
    guard: Optional[Callable[[Bindings], bool]] = field(default=None, compare=False)
    priority: int = 0

    def apply(self, atom: Atom) -> Optional[Atom]:
        """
        Rewrite ``atom`` with this rule.

        Returns:
            The substituted template, or None when the pattern does not match
            or the guard rejects the bindings
        """
        bindings = match(atom, self.pattern)
        if bindings is None:
            return None
        if self.guard is not None and not self.guard(bindings):
            return None
        return bindings.apply(self.template)

    def to_metta(self) -> str:
        return f"(= {to_metta(self.pattern)} {to_metta(self.template)})"


class Space:
    """
    Named atom collection plus rule set.

    Atoms iterate in insertion order. Rules are kept sorted by descending
    priority; rules of equal priority keep their insertion order.
    """

    def __init__(self, name: str = "default"):
        self.name = name
        self._atoms: Dict[Atom, None] = {}
        self._rules: List[Rule] = []

    def add(self, atom: Atom) -> bool:
        """Insert an atom. Returns False if an equal atom is already present."""
        if atom in self._atoms:
            return False
        self._atoms[atom] = None
        return True

    def remove(self, atom: Atom) -> bool:
        """Remove an atom. Returns False if it was not present."""
        if atom not in self._atoms:
            return False
        del self._atoms[atom]
        return True

    def contains(self, atom: Atom) -> bool:
        return atom in self._atoms

    __contains__ = contains

    @property
    def atoms(self) -> List[Atom]:
        return list(self._atoms)

    @property
    def rules(self) -> List[Rule]:
        return list(self._rules)

    @property
    def size(self) -> int:
        return len(self._atoms)

    def __len__(self):
        return len(self._atoms)

    def clear(self):
        self._atoms.clear()

    def add_rule(self, rule: Rule):
        self._rules.append(rule)
        # list.sort is stable, so equal priorities stay in insertion order
        self._rules.sort(key=lambda r: -r.priority)
        logger.debug(f"Space '{self.name}': added rule {rule.name} {rule.to_metta()}")

    def define(self, name: str, pattern: Atom, template: Atom, priority: int = 0,
               guard: Optional[Callable[[Bindings], bool]] = None) -> Rule:
        rule = Rule(name, pattern, template, guard=guard, priority=priority)
        self.add_rule(rule)
        return rule

    def query(self, pattern: Atom) -> List[Bindings]:
        return match_all(self._atoms, pattern)

    def query_atoms(self, pattern: Atom) -> List[Atom]:
        return [atom for atom in self._atoms if match(atom, pattern) is not None]

    def reduce(self, atom: Atom, max_steps: int = 100) -> Atom:
        return reduce(atom, self._rules, max_steps)

    def to_metta(self) -> str:
        """Export atoms followed by rules, one per line."""
        lines = [to_metta(atom) for atom in self._atoms]
        lines.extend(rule.to_metta() for rule in self._rules)
        return "\n".join(lines)

    def __repr__(self):
        return f"Space({self.name!r}, atoms={len(self._atoms)}, rules={len(self._rules)})"
