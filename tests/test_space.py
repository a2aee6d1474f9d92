#!/usr/bin/env python3
"""
Unit tests for spaces, rewrite rules and the reducer.
"""

import unittest

from protometta import Rule, Space, reduce, parse, sym, var, gnd, expr, EMPTY


def atom(text):
    return parse(text)[0]


class TestRule(unittest.TestCase):
    """Test cases for Rule application."""

    def test_apply(self):
        rule = Rule("double", atom("(double $x)"), atom("(+ $x $x)"))
        self.assertEqual(rule.apply(atom("(double 5)")), atom("(+ 5 5)"))
        self.assertIsNone(rule.apply(atom("(triple 5)")))

    def test_guard(self):
        positive = Rule("pos", atom("(sign $x)"), sym("positive"),
                        guard=lambda b: b.get("x").as_float() > 0)
        self.assertEqual(positive.apply(atom("(sign 3)")), sym("positive"))
        self.assertIsNone(positive.apply(atom("(sign -3)")))

    def test_to_metta(self):
        rule = Rule("inc", atom("(inc $x)"), atom("(+ $x 1)"))
        self.assertEqual(rule.to_metta(), "(= (inc $x) (+ $x 1))")


class TestSpace(unittest.TestCase):
    """Test cases for the Space atom collection."""

    def setUp(self):
        self.space = Space("test")

    def test_empty_space(self):
        self.assertEqual(self.space.size, 0)
        self.assertEqual(self.space.atoms, [])

    def test_add_is_set_like(self):
        self.assertTrue(self.space.add(sym("foo")))
        self.assertFalse(self.space.add(sym("foo")))
        self.assertEqual(self.space.size, 1)
        self.assertTrue(self.space.contains(sym("foo")))
        self.assertIn(sym("foo"), self.space)

    def test_remove(self):
        self.space.add(sym("foo"))
        self.assertTrue(self.space.remove(sym("foo")))
        self.assertFalse(self.space.remove(sym("foo")))
        self.assertEqual(len(self.space), 0)

    def test_insertion_order(self):
        for name in ["c", "a", "b"]:
            self.space.add(sym(name))
        self.assertEqual(self.space.atoms, [sym("c"), sym("a"), sym("b")])

    def test_atoms_returns_copy(self):
        self.space.add(sym("foo"))
        self.space.atoms.append(sym("bar"))
        self.assertEqual(self.space.size, 1)

    def test_clear(self):
        self.space.add(sym("foo"))
        self.space.clear()
        self.assertEqual(self.space.size, 0)

    def test_query(self):
        self.space.add(atom("(Person Alice)"))
        self.space.add(atom("(Person Bob)"))
        self.space.add(atom("(Animal Cat)"))
        results = self.space.query(atom("(Person $name)"))
        self.assertEqual([b.get("name") for b in results], [sym("Alice"), sym("Bob")])
        self.assertEqual(self.space.query_atoms(atom("(Person $name)")),
                         [atom("(Person Alice)"), atom("(Person Bob)")])
        self.assertEqual(self.space.query(atom("(Plant $x)")), [])

    def test_rules_sorted_by_priority(self):
        self.space.define("low", atom("(f $x)"), sym("low"), priority=0)
        self.space.define("high", atom("(f $x)"), sym("high"), priority=10)
        self.space.define("low2", atom("(f $x)"), sym("low2"), priority=0)
        self.space.define("mid", atom("(f $x)"), sym("mid"), priority=5)
        self.assertEqual([r.name for r in self.space.rules], ["high", "mid", "low", "low2"])
        self.assertEqual(self.space.reduce(atom("(f 1)")), sym("high"))

    def test_to_metta(self):
        self.space.add(sym("foo"))
        self.space.add(gnd(42))
        self.space.define("inc", atom("(inc $x)"), atom("(+ $x 1)"))
        self.assertEqual(self.space.to_metta(), "foo\n42\n(= (inc $x) (+ $x 1))")

    def test_export_parses_back(self):
        for value in [1e20, 1e-07, -0.25, 6.0]:
            self.space.add(gnd(value))
        self.space.add(expr(sym("scale"), gnd(3.5e-12)))
        self.assertEqual(parse(self.space.to_metta()), self.space.atoms)


class TestReducer(unittest.TestCase):
    """Test cases for rule reduction."""

    def setUp(self):
        self.space = Space()
        self.space.define("double", atom("(double $x)"), atom("(* 2 $x)"))
        self.space.define("id", atom("(id $x)"), var("x"))

    def test_single_rewrite(self):
        self.assertEqual(self.space.reduce(atom("(double 21)")), atom("(* 2 21)"))

    def test_repeated_rewrites(self):
        self.assertEqual(self.space.reduce(atom("(id (id (id a)))")), sym("a"))

    def test_reduces_children(self):
        self.assertEqual(self.space.reduce(atom("(pair (id a) (double 3))")),
                         atom("(pair a (* 2 3))"))

    def test_normal_form_is_fixed_point(self):
        for text in ["a", "42", "(pair a b)", "()", "(* 2 3)"]:
            a = atom(text)
            for steps in [0, 1, 5, 100]:
                with self.subTest(atom=text, steps=steps):
                    self.assertEqual(self.space.reduce(a, steps), a)
        self.assertEqual(self.space.reduce(EMPTY, 10), EMPTY)

    def test_zero_steps_returns_input(self):
        self.assertEqual(self.space.reduce(atom("(double 1)"), 0), atom("(double 1)"))

    def test_step_budget_exhaustion_is_silent(self):
        self.space.define("loop", atom("(loop $x)"), atom("(loop (s $x))"))
        result = self.space.reduce(atom("(loop z)"), 3)
        self.assertEqual(result, atom("(loop (s (s (s z))))"))

    def test_non_terminating_rule_returns(self):
        self.space.define("spin", atom("(spin $x)"), atom("(spin $x)"))
        self.assertEqual(self.space.reduce(atom("(spin a)"), 50), atom("(spin a)"))

    def test_child_rewrites_share_the_budget(self):
        result = self.space.reduce(atom("(pair (id a) (id b) (id c))"), 2)
        self.assertEqual(result, atom("(pair a b (id c))"))

    def test_deep_subexpressions_are_left_alone(self):
        rules = self.space.rules
        nested = atom("(a (b (id x)))")
        self.assertEqual(reduce(nested, rules, 10, max_depth=1), nested)
        self.assertEqual(reduce(nested, rules, 10, max_depth=2), atom("(a (b x))"))

    def test_recursion_under_if_stays_bounded(self):
        self.space.define("fact", atom("(fact $n)"),
                          atom("(if (== $n 0) 1 (* $n (fact (- $n 1))))"))
        result = self.space.reduce(atom("(fact 3)"), 1000)
        self.assertEqual(result.head, sym("if"))

    def test_module_function(self):
        rules = self.space.rules
        self.assertEqual(reduce(atom("(id b)"), rules, 10), sym("b"))
        self.assertEqual(reduce(atom("(id b)"), [], 10), atom("(id b)"))


if __name__ == '__main__':
    unittest.main()
