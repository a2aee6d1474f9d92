#!/usr/bin/env python3
"""
protometta Demo

This script demonstrates the basic functionality of the MeTTa interpreter
with simple example programs.
"""

from protometta import Interpreter, to_metta


def show(interpreter: Interpreter, code: str):
    results = interpreter.run(code)
    print(f"   {code}")
    print(f"   => {', '.join(to_metta(r) for r in results) or '(no results)'}")


def demo_basic_examples():
    """Demonstrate arithmetic, rules, queries and non-determinism."""

    print("protometta Demo - Basic Examples")
    print("=" * 50)

    interpreter = Interpreter()
    interpreter.load_stdlib()

    print("\n1. Arithmetic")
    show(interpreter, "(+ 1 2 3)")
    show(interpreter, "(* (+ 2 3) (- 10 4))")

    print("\n2. Rewrite rules")
    interpreter.run("(= (double $x) (* 2 $x))")
    show(interpreter, "(double 21)")
    show(interpreter, "(compose double double 5)")

    print("\n3. Facts and pattern queries")
    interpreter.run("(add-atom &self (Person Alice))")
    interpreter.run("(add-atom &self (Person Bob))")
    show(interpreter, "(match &self (Person $name) $name)")

    print("\n4. Non-determinism")
    show(interpreter, "(superpose (1 2 3))")
    show(interpreter, "(collapse (superpose ((+ 1 1) (* 2 2))))")

    print("\n5. Control flow")
    show(interpreter, "(let $x 7 (* $x $x))")
    show(interpreter, "(if (< 5 10) yes no)")
    show(interpreter, "(case (pair a b) ((pair $l $r) ($r $l)) ($other none))")

    print("\n6. Quoting")
    show(interpreter, "(quote (double 4))")
    show(interpreter, "(unquote (quote (double 4)))")


if __name__ == "__main__":
    demo_basic_examples()
