"""Builtin procedures for ljsp. The table is fixed: programs cannot define new builtins, and anything not in BUILTINS is
an unknown operator.

Arithmetic builtins are left folds seeded with their first argument, so (- 10 2 3) is (10 - 2) - 3 and (- 5) is 5.
Values are Python ints/floats, strs, and evaluator Closures.
"""

from dataclasses import dataclass
from functools import reduce
from typing import Callable, Optional

from ljsp.lang.error import ArityMismatch, DivisionByZero, NumericOverflow, TypeMismatch

PRINT_SEPARATOR = ","


def is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def text(value):
    """Textual form of an evaluated value. Closures render as their lambda source."""
    if isinstance(value, str):
        return value
    return str(value)


def numbers(operator, args):
    """Returns args if every element is a number, else raises TypeMismatch naming operator."""
    for arg in args:
        if not is_number(arg):
            raise TypeMismatch(operator, text(arg))
    return args


def divide(a, b):
    """Division that stays integral when two integers divide exactly."""
    if b == 0:
        raise DivisionByZero("/")
    if isinstance(a, int) and isinstance(b, int) and a % b == 0:
        return a // b
    return a / b


def modulo(a, b):
    if b == 0:
        raise DivisionByZero("%")
    return a % b


def power(a, b):
    try:
        result = a ** b
    except ZeroDivisionError:
        raise DivisionByZero("expt")
    if isinstance(result, complex):
        raise TypeMismatch("expt", f"{a} {b}")
    return result


def fold(operator, func):
    """Left fold of func over numeric arguments. Results too large for a float raise NumericOverflow."""

    def _fold(args):
        try:
            return reduce(func, numbers(operator, args))
        except OverflowError:
            raise NumericOverflow(operator)

    return _fold


def absolute(args):
    value, = numbers("abs", args)
    return abs(value)


def join(args):
    """print: joins the textual form of every argument."""
    return PRINT_SEPARATOR.join(text(arg) for arg in args)


def loop(args):
    """(loop times body): concatenates the text of body times times. The result is always text, even when body is a
    number: (loop 3 7) is '777'.
    """
    times, body = args
    if not isinstance(times, int) or isinstance(times, bool) or times < 0:
        raise TypeMismatch("loop", text(times))
    return "".join(text(body) for __ in range(times))


@dataclass
class Builtin:
    """Named builtin procedure. max_args of None means variadic."""
    name: str
    func: Callable
    min_args: int
    max_args: Optional[int] = None

    @property
    def arity(self):
        """Human-readable accepted argument count."""
        if self.max_args is None:
            return f"at least {self.min_args}"
        if self.max_args == self.min_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"

    def __call__(self, args):
        if len(args) < self.min_args or (self.max_args is not None and len(args) > self.max_args):
            raise ArityMismatch(self.name, self.arity, len(args))
        return self.func(args)


BUILTINS = {
    builtin.name: builtin for builtin in [
        Builtin("+", fold("+", lambda a, b: a + b), 1),
        Builtin("-", fold("-", lambda a, b: a - b), 1),
        Builtin("*", fold("*", lambda a, b: a * b), 1),
        Builtin("/", fold("/", divide), 1),
        Builtin("%", fold("%", modulo), 1),
        Builtin("abs", absolute, 1, 1),
        Builtin("expt", fold("expt", power), 2),
        Builtin("print", join, 1),
        Builtin("loop", loop, 2, 2),
    ]
}
