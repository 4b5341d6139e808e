import unittest

from ljsp.lang.error import (ArityMismatch, EvalError, NumericOverflow, RecursionDepthExceeded, TypeMismatch,
                             UnknownOperator)
from ljsp.lang.evaluator import Closure, Evaluator
from ljsp.syntax.lexical import Integer, Lambda, Parser, Procedure, String, Symbol
from ljsp.syntax.tokenizer import Tokenizer


def evaluate(source):
    return Evaluator().evaluate(Parser(Tokenizer(source).tokenize()).parse())


class EvaluatorTestCase(unittest.TestCase):

    def test_atoms(self):
        cases = {
            "42": 42,
            "-42": -42,
            "0": 0,
            "2.5": 2.5,
            "\"text\"": "text",
            "sym": "sym",
            "(quote (1 2 3))": "(1 2 3)",
            "(quote +)": "+",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, evaluate(case), case)

        for n in [0, 1, -1, 7, 1234567, -98765]:
            self.assertEqual(n, evaluate(str(n)), n)

    def test_arithmetic(self):
        cases = {
            "(+ 12 18)": 30,
            "(- 10 2 3)": 5,
            "(* 3 (+ 5 6))": 33,
            "(+ 1 (/ 2 18))": 1 + 2 / 18,
            "(/ 18 2)": 9,
            "(% 35 5)": 0,
            "(expt 2 10)": 1024,
            "(abs -3)": 3,
            "(abs (- 61 (+ 12 (* 2 18) (+ 50 5))))": 42,
            "(abs ((lambda (x) (- 2 (+ 3 x))) (+ 1 (* 4 (* 2 (- (* 5 2) 5))))))": 42,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, evaluate(case), case)

    def test_lambda_application(self):
        cases = {
            "((lambda (x) (+ x 10)) 5)": 15,
            "((lambda (x y) (% x y)) 5 35)": 5,
            "((lambda () 7))": 7,
            "((lambda (x) (* x x)) (+ 1 2))": 9,
            "(((lambda (x) (lambda (y) (+ x y))) 5) 7)": 12,
            "((lambda (f x) (f x)) (lambda (n) (* n n)) 6)": 36,
            "((lambda (x) ((lambda (x) (+ x 1)) 10)) 5)": 11,
            "((lambda (op) (op 1 2)) +)": 3,
            "((lambda (s) (print s s)) \"ab\")": "ab,ab",
            "((lambda (x) (quote x)) 1)": "x",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, evaluate(case), case)

    def test_closure_value(self):
        closure = evaluate("(lambda (x) (+ x 1))")
        self.assertIsInstance(closure, Closure)
        self.assertEqual(["x"], closure.params)
        self.assertEqual("(lambda (x) (+ x 1))", str(closure))

        evaluator = Evaluator()
        self.assertEqual(2, evaluator.apply(closure, [1]))
        self.assertEqual(11, evaluator.apply(closure, [10]))  # the body is untouched by the first application

    def test_repeated_application(self):
        self.assertEqual(9, evaluate("((lambda (f) (+ (f 1) (f 2) (f 3))) (lambda (x) (+ x 1)))"))
        self.assertEqual(16, evaluate("((lambda (twice) ((twice (lambda (x) (* x 2))) 4)) "
                                      "(lambda (f) (lambda (x) (f (f x)))))"))

    def test_tree_not_mutated(self):
        tree = Parser(Tokenizer("((lambda (x) (+ x 10)) 5)").tokenize()).parse()
        before = tree.generate()

        self.assertEqual(15, Evaluator().evaluate(tree))
        self.assertEqual(15, Evaluator().evaluate(tree))
        self.assertEqual(before, tree.generate())

    def test_loop(self):
        self.assertEqual("xxx", evaluate("(loop 3 (print \"x\"))"))
        self.assertEqual(3 * len(evaluate("(print \"testing\")")), len(evaluate("(loop 3 (print \"testing\"))")))
        self.assertEqual("333", evaluate("(loop 3 (+ 1 2))"))
        self.assertEqual("", evaluate("(loop 0 (+ 1 2))"))

    def test_print(self):
        self.assertEqual("x", evaluate("(print \"x\")"))
        self.assertEqual("1,two,3", evaluate("(print 1 \"two\" (+ 1 2))"))
        self.assertEqual("(lambda (x) x)", evaluate("(print (lambda (x) x))"))

    def test_unknown_operator(self):
        should_raise = {"(unknownop 1 2)": "unknownop", "(list 1)": "list", "((lambda (f) (f 1)) \"g\")": "g"}
        for case, name in should_raise.items():
            with self.assertRaises(UnknownOperator, msg=case) as context:
                evaluate(case)
            self.assertEqual(name, context.exception.name, case)
            self.assertIsInstance(context.exception, EvalError, case)

    def test_arity_mismatch(self):
        should_raise = {
            "((lambda (x) x))": ("lambda", "1", 0),
            "((lambda (x y) x) 1 2 3)": ("lambda", "2", 3),
            "(abs 1 2)": ("abs", "1", 2),
        }
        for case, (operator, expected, got) in should_raise.items():
            with self.assertRaises(ArityMismatch, msg=case) as context:
                evaluate(case)
            self.assertEqual(operator, context.exception.operator, case)
            self.assertEqual(expected, context.exception.expected, case)
            self.assertEqual(got, context.exception.got, case)

    def test_type_mismatch(self):
        should_raise = {
            "(/ 10 \"x\")": "/",
            "(+ 1 sym)": "+",
            "((lambda (f) (f 1)) 5)": "5",
            "((+ 1 2) 3)": "(+ 1 2)",
        }
        for case, operator in should_raise.items():
            with self.assertRaises(TypeMismatch, msg=case) as context:
                evaluate(case)
            self.assertEqual(operator, context.exception.operator, case)

    def test_numeric_overflow(self):
        should_raise = {
            "(expt 10.5 400)": "expt",
            "(/ (expt 10 400) 3)": "/",
            "(* (expt 10 400) 1.5)": "*",
        }
        for case, operator in should_raise.items():
            with self.assertRaises(NumericOverflow, msg=case) as context:
                evaluate(case)
            self.assertEqual(operator, context.exception.operator, case)
            self.assertIsInstance(context.exception, EvalError, case)

    def test_recursion_depth(self):
        tree = Integer(0)
        for __ in range(5000):
            tree = Procedure(Symbol("+"), [Integer(1), tree])
        self.assertRaises(RecursionDepthExceeded, Evaluator().run, tree)

        omega = Parser(Tokenizer("((lambda (f) (f f)) (lambda (f) (f f)))").tokenize()).parse()
        self.assertRaises(RecursionDepthExceeded, Evaluator().run, omega)

        shallow = Integer(0)
        for __ in range(50):
            shallow = Procedure(Symbol("+"), [Integer(1), shallow])
        self.assertEqual(50, Evaluator().run(shallow))

    def test_arguments_before_operator(self):
        # the bad argument is reported even though the operator is unknown too
        self.assertRaises(TypeMismatch, evaluate, "(unknownop (+ 1 \"a\"))")

    def test_reify(self):
        self.assertEqual(Integer(3), Evaluator.reify(3))
        self.assertEqual(String("s"), Evaluator.reify("s"))
        lambda_ = Lambda(["x"], Symbol("x"))
        self.assertIs(lambda_, Evaluator.reify(Closure(lambda_)))
        self.assertRaises(TypeError, Evaluator.reify, [1, 2])

    def test_builtin_table(self):
        evaluator = Evaluator(builtins={})
        self.assertRaises(UnknownOperator, evaluator.evaluate, Parser(Tokenizer("(+ 1 2)").tokenize()).parse())


if __name__ == '__main__':
    unittest.main()
