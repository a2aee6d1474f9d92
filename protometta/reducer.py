"""
protometta Reducer

Rewrites an atom with a rule list until nothing changes or the step budget
runs out.
"""

from typing import Sequence

from .core import Atom, Expression


def reduce(atom: Atom, rules: Sequence, max_steps: int = 100, max_depth: int = 64) -> Atom:
    """
    Reduce an atom to normal form under ``rules``.

    Each step applies the first rule (in list order) that rewrites the atom.
    When no rule applies at the top, the children of an expression are
    reduced with the remaining budget and the expression is rebuilt. Every
    rewrite, at any depth, is charged to the same ``max_steps`` budget.

    Args:
        atom: The atom to reduce
        rules: Rules in priority order; each needs an ``apply(atom)`` method
            returning the rewritten atom or None
        max_steps: Maximum number of rewrites
        max_depth: Sub-expressions nested deeper than this are left as they are

    Returns:
        The reduced atom. If the budget runs out the current, possibly
        partially reduced atom is returned; no error is signalled.
    """
    steps = 0

    def reduce_at(current: Atom, depth: int) -> Atom:
        nonlocal steps
        if depth > max_depth:
            return current

        while steps < max_steps:
            changed = False

            for rule in rules:
                result = rule.apply(current)
                if result is not None:
                    current = result
                    changed = True
                    steps += 1
                    break

            if not changed and isinstance(current, Expression):
                new_children = []
                for child in current.children:
                    reduced_child = reduce_at(child, depth + 1)
                    if reduced_child != child:
                        changed = True
                    new_children.append(reduced_child)
                if changed:
                    current = Expression(new_children)

            if not changed:
                break

        return current

    return reduce_at(atom, 0)
