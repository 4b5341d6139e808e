"""Tree-walking evaluation of ljsp expressions.

Evaluation is eager and call-by-value: the arguments of a procedure are evaluated left to right before its operator is
resolved. Lambdas evaluate to Closures, which are applied by substitution: each evaluated argument is turned back into
an expression and substituted for its parameter in a fresh copy of the body, which is then evaluated. The parsed tree
is never modified, so a Closure can be applied any number of times.
"""

from dataclasses import dataclass

from ljsp.lang.error import ArityMismatch, RecursionDepthExceeded, TypeMismatch, UnknownOperator
from ljsp.lang.numerical import BUILTINS, is_number, text
from ljsp.syntax.lexical import Integer, Lambda, Procedure, Quote, String, Symbol


@dataclass
class Closure:
    """A lambda as a value: its parameters and the body to substitute into."""
    lambda_: Lambda

    @property
    def params(self):
        return self.lambda_.params

    def bind(self, args):
        """Returns the body with args substituted for params. Raises ArityMismatch if the counts differ."""
        if len(args) != len(self.params):
            raise ArityMismatch("lambda", str(len(self.params)), len(args))
        bindings = {param: Evaluator.reify(arg) for param, arg in zip(self.params, args)}
        return self.lambda_.body.sub(bindings)

    def __str__(self):
        return self.lambda_.generate()


class Evaluator:
    """Evaluates expression trees against the fixed builtin table."""

    def __init__(self, builtins=None):
        self.builtins = BUILTINS if builtins is None else builtins

    def run(self, expr):
        """Evaluates expr from the top. Running out of Python stack, from deep nesting or unbounded application,
        raises RecursionDepthExceeded.
        """
        try:
            return self.evaluate(expr)
        except RecursionError:
            raise RecursionDepthExceeded()

    def evaluate(self, expr):
        if isinstance(expr, (Integer, String)):
            return expr.value
        if isinstance(expr, Symbol):
            return expr.value  # no environment: a bare symbol is its own name
        if isinstance(expr, Quote):
            return expr.text
        if isinstance(expr, Lambda):
            return Closure(expr)
        if isinstance(expr, Procedure):
            args = [self.evaluate(arg) for arg in expr.args]
            return self.apply(self.resolve(expr.func), args)

        raise TypeError(f"cannot evaluate {expr!r}")

    def resolve(self, func):
        """Returns the callable named or produced by func: a builtin or a Closure."""
        if isinstance(func, Symbol):
            return self.lookup(func.value)

        value = self.evaluate(func)
        if isinstance(value, Closure):
            return value
        if isinstance(value, str):
            return self.lookup(value)  # builtin name passed around as a value, ex: ((lambda (op) (op 1 2)) +)
        raise TypeMismatch(func.generate(), text(value))

    def lookup(self, name):
        try:
            return self.builtins[name]
        except KeyError:
            raise UnknownOperator(name)

    def apply(self, proc, args):
        if isinstance(proc, Closure):
            return self.evaluate(proc.bind(args))
        return proc(args)

    @staticmethod
    def reify(value):
        """Turns an evaluated value back into an expression that evaluates to it."""
        if isinstance(value, Closure):
            return value.lambda_
        if is_number(value):
            return Integer(value)
        if isinstance(value, str):
            return String(value)
        raise TypeError(f"cannot substitute {value!r}")
