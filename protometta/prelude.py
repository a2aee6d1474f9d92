"""Standard library loaded by Interpreter.load_stdlib()."""

STDLIB = """
; Identity function
(= (id $x) $x)

; Function composition
(= (compose $f $g $x) ($f ($g $x)))

; List operations
(= (head ($x . $xs)) $x)
(= (tail ($x . $xs)) $xs)
(= (cons $x $xs) ($x . $xs))
(= (nil? ()) True)
(= (nil? ($x . $xs)) False)

; Boolean operations
(= (bool-not True) False)
(= (bool-not False) True)

; Equality
(= (eq $x $x) True)

; Type predicates
(= (symbol? $x) (: $x Symbol))
(= (expression? $x) (: $x Expression))
"""
