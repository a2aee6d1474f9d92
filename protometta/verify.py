"""
protometta Verification System

This module implements static checks on parsed programs, catching
malformed special forms and suspicious rules before evaluation.
"""

from typing import Iterable, List, Set, Tuple

from .core import Atom, Expression, Symbol, Variable, atom_depth, iter_atoms, to_metta

# Expected expression sizes (head included) for forms with a fixed shape
_FIXED_ARITIES = {
    'match': 4, 'let': 4, 'let*': 3, 'if': 4,
    'quote': 2, 'unquote': 2, 'collapse': 2, 'superpose': 2,
    '=': 3, 'add-atom': 3, 'remove-atom': 3, 'not': 2,
    '==': 3, '<': 3, '>': 3, '<=': 3, '>=': 3,
}


def check_arity(atom: Atom) -> Tuple[bool, List[str]]:
    """
    Check that every special form and fixed-arity builtin has the right
    number of arguments.

    Forms under ``quote`` are data and are not checked.

    Args:
        atom: The program atom to check

    Returns:
        Tuple of (is_valid, error_messages)
    """
    errors = []

    def visit(node: Atom):
        if not isinstance(node, Expression) or not node.children:
            return
        head = node.head
        if isinstance(head, Symbol):
            name = head.name
            if name == 'quote':
                if node.arity != 2:
                    errors.append(f"'quote' expects 1 argument, got {node.arity - 1}")
                return
            expected = _FIXED_ARITIES.get(name)
            if expected is not None and node.arity != expected:
                errors.append(f"'{name}' expects {expected - 1} arguments, "
                              f"got {node.arity - 1}: {to_metta(node)}")
            elif name == 'case' and node.arity < 3:
                errors.append(f"'case' expects a scrutinee and at least one clause: {to_metta(node)}")
            elif name == '/' and node.arity < 3:
                errors.append(f"'/' expects at least 2 arguments: {to_metta(node)}")
        for child in node.children:
            visit(child)

    visit(atom)
    return len(errors) == 0, errors


def _variables(atom: Atom) -> Set[str]:
    return {node.name for _, _, node in iter_atoms(atom) if isinstance(node, Variable)}


def check_rule_vars(atom: Atom) -> Tuple[bool, List[str]]:
    """
    Check that the template of every ``(= pattern template)`` only uses
    variables bound by its pattern.
    """
    errors = []
    for _, _, node in iter_atoms(atom):
        if (isinstance(node, Expression) and node.arity == 3
                and node.head == Symbol('=')):
            unbound = _variables(node[2]) - _variables(node[1])
            for name in sorted(unbound):
                errors.append(f"Unbound variable ${name} in rule template: {to_metta(node)}")
    return len(errors) == 0, errors


def check_depth(atom: Atom, max_depth: int = 32) -> Tuple[bool, List[str]]:
    errors = []
    actual_depth = atom_depth(atom)
    if actual_depth > max_depth:
        errors.append(f"Atom depth {actual_depth} exceeds maximum allowed depth {max_depth}")
    return len(errors) == 0, errors


def check_node_count(atom: Atom, max_nodes: int = 10000) -> Tuple[bool, List[str]]:
    errors = []
    node_count = sum(1 for _ in iter_atoms(atom))
    if node_count > max_nodes:
        errors.append(f"Atom has {node_count} nodes, exceeds maximum allowed {max_nodes}")
    return len(errors) == 0, errors


def verify_atoms(atoms: Iterable[Atom], max_depth: int = 32,
                 max_nodes: int = 10000) -> Tuple[bool, List[str]]:
    """
    Run every check over a sequence of top-level atoms.

    Args:
        atoms: Parsed program
        max_depth: Maximum allowed nesting depth per atom
        max_nodes: Maximum allowed number of nodes per atom

    Returns:
        Tuple of (is_valid, error_messages)
    """
    all_errors = []
    for atom in atoms:
        checks = [
            check_arity(atom),
            check_rule_vars(atom),
            check_depth(atom, max_depth),
            check_node_count(atom, max_nodes),
        ]
        for is_valid, errors in checks:
            if not is_valid:
                all_errors.extend(errors)
    return len(all_errors) == 0, all_errors
