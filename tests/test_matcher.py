#!/usr/bin/env python3
"""
Unit tests for bindings, pattern matching and unification.
"""

import unittest

from protometta import (
    Bindings, EMPTY, Error, Expression, match, match_all, unify, parse, sym, var, gnd, expr,
)


def atom(text):
    return parse(text)[0]


class TestBindings(unittest.TestCase):
    """Test cases for the Bindings substitution environment."""

    def test_empty_bindings(self):
        bindings = Bindings()
        self.assertTrue(bindings.is_empty())
        self.assertEqual(len(bindings), 0)
        # An empty result still means "matched"
        self.assertTrue(bindings)

    def test_bind_and_get(self):
        bindings = Bindings()
        self.assertTrue(bindings.bind("x", sym("foo")))
        self.assertEqual(bindings.get("x"), sym("foo"))
        self.assertEqual(bindings["x"], sym("foo"))
        self.assertTrue(bindings.has("x"))
        self.assertIn("x", bindings)
        self.assertIsNone(bindings.get("y"))

    def test_conflicting_bind_fails(self):
        bindings = Bindings()
        self.assertTrue(bindings.bind("x", sym("foo")))
        self.assertFalse(bindings.bind("x", sym("bar")))
        self.assertEqual(bindings.get("x"), sym("foo"))

    def test_rebinding_equal_atom_succeeds(self):
        bindings = Bindings()
        self.assertTrue(bindings.bind("x", expr(sym("a"), gnd(1))))
        self.assertTrue(bindings.bind("x", expr(sym("a"), gnd(1))))

    def test_apply(self):
        bindings = Bindings({"x": sym("foo"), "y": gnd(2)})
        self.assertEqual(bindings.apply(var("x")), sym("foo"))
        self.assertEqual(bindings.apply(var("z")), var("z"))
        self.assertEqual(bindings.apply(atom("(f $x (g $y $z))")),
                         atom("(f foo (g 2 $z))"))

    def test_merge(self):
        b1 = Bindings({"x": sym("a")})
        b2 = Bindings({"y": sym("b"), "x": sym("a")})
        merged = b1.merge(b2)
        self.assertIsNotNone(merged)
        self.assertEqual(merged.to_dict(), {"x": sym("a"), "y": sym("b")})
        # Inputs are untouched
        self.assertFalse(b1.has("y"))

    def test_merge_conflict(self):
        b1 = Bindings({"x": sym("a")})
        b2 = Bindings({"x": sym("b")})
        self.assertIsNone(b1.merge(b2))

    def test_str(self):
        self.assertEqual(str(Bindings({"x": sym("a"), "y": gnd(1)})), "$x = a, $y = 1")


class TestMatch(unittest.TestCase):
    """Test cases for one-directional matching."""

    def test_symbol_to_symbol(self):
        self.assertIsNotNone(match(sym("foo"), sym("foo")))
        self.assertIsNone(match(sym("foo"), sym("bar")))

    def test_atom_to_variable(self):
        bindings = match(sym("foo"), var("x"))
        self.assertEqual(bindings.get("x"), sym("foo"))

    def test_expression_pattern(self):
        bindings = match(atom("(Person Alice)"), atom("(Person $name)"))
        self.assertEqual(bindings.get("name"), sym("Alice"))

    def test_arity_mismatch(self):
        self.assertIsNone(match(atom("(a b)"), atom("(a)")))
        self.assertIsNone(match(sym("a"), atom("(a)")))

    def test_repeated_variable_must_agree(self):
        self.assertIsNotNone(match(atom("(eq a a)"), atom("(eq $x $x)")))
        self.assertIsNone(match(atom("(eq a b)"), atom("(eq $x $x)")))

    def test_grounded_equality(self):
        self.assertIsNotNone(match(gnd(3), gnd(3)))
        self.assertIsNone(match(gnd(3), gnd("3")))

    def test_empty_pattern(self):
        self.assertIsNotNone(match(EMPTY, EMPTY))
        self.assertIsNone(match(Expression(), EMPTY))

    def test_variables_in_data_are_not_bound(self):
        # Matching is one-directional: a variable on the data side is just data
        self.assertIsNone(match(var("x"), sym("foo")))

    def test_existing_bindings_are_respected_and_not_mutated(self):
        initial = Bindings({"x": sym("a")})
        self.assertIsNone(match(atom("(f b)"), atom("(f $x)"), initial))
        result = match(atom("(f a $y)"), atom("(f $x $z)"), initial)
        self.assertEqual(result.get("z"), var("y"))
        self.assertFalse(initial.has("z"))

    def test_match_self_gives_empty_bindings(self):
        for text in ["foo", "42", '"s"', "(f (g 1) ())", "(a b c)"]:
            with self.subTest(atom=text):
                a = atom(text)
                bindings = match(a, a)
                self.assertIsNotNone(bindings)
                self.assertTrue(bindings.is_empty())
        self.assertTrue(match(EMPTY, EMPTY).is_empty())
        self.assertTrue(match(Error("e"), Error("e")).is_empty())

    def test_variable_pattern_matches_anything(self):
        for a in [sym("foo"), gnd(1.5), atom("(f (g x))"), EMPTY, Error("oops")]:
            with self.subTest(atom=str(a)):
                self.assertEqual(match(a, var("v")).get("v"), a)

    def test_match_all(self):
        atoms = [atom("(Person Alice)"), atom("(Person Bob)"), atom("(Animal Cat)")]
        results = match_all(atoms, atom("(Person $name)"))
        self.assertEqual([b.get("name") for b in results], [sym("Alice"), sym("Bob")])


class TestUnify(unittest.TestCase):
    """Test cases for two-directional unification."""

    def test_variable_with_symbol(self):
        bindings = unify(var("x"), sym("foo"))
        self.assertEqual(bindings.get("x"), sym("foo"))
        bindings = unify(sym("foo"), var("x"))
        self.assertEqual(bindings.get("x"), sym("foo"))

    def test_variables_on_both_sides(self):
        bindings = unify(atom("(f $x b)"), atom("(f a $y)"))
        self.assertEqual(bindings.get("x"), sym("a"))
        self.assertEqual(bindings.get("y"), sym("b"))

    def test_same_variable(self):
        bindings = unify(var("x"), var("x"))
        self.assertIsNotNone(bindings)
        self.assertTrue(bindings.is_empty())

    def test_conflict(self):
        self.assertIsNone(unify(atom("(f $x $x)"), atom("(f a b)")))
        self.assertIsNone(unify(sym("a"), sym("b")))
        self.assertIsNone(unify(atom("(f a)"), atom("(f a b)")))
        self.assertIsNone(unify(sym("a"), gnd(1)))

    def test_uses_existing_bindings(self):
        initial = Bindings({"x": sym("a")})
        self.assertIsNone(unify(var("x"), sym("b"), initial))
        self.assertIsNotNone(unify(var("x"), sym("a"), initial))

    def test_symmetry(self):
        pairs = [
            ("(f $x b)", "(f a $y)"),
            ("(f $x $x)", "(f a b)"),
            ("(f $x $x)", "(f a a)"),
            ("$x", "(g $y)"),
            ("(a b)", "(a b c)"),
            ("42", "42"),
            ("42", "$n"),
            ("(p (q $x) $y)", "(p $z r)"),
        ]
        for left, right in pairs:
            with self.subTest(left=left, right=right):
                forward = unify(atom(left), atom(right))
                backward = unify(atom(right), atom(left))
                self.assertEqual(forward is None, backward is None)
                if forward is not None:
                    self.assertEqual(forward.apply(atom(left)), forward.apply(atom(right)))
                    self.assertEqual(backward.apply(atom(left)), backward.apply(atom(right)))


if __name__ == '__main__':
    unittest.main()
