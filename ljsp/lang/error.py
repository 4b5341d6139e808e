"""Error handling for ljsp. Every stage raises a subclass of GenericException and aborts on the first one: there is no
recovery or resynchronization. If another type of error makes it all the way to ErrorHandler, it is assumed to be an
internal issue.

Taxonomy (the kind attribute of each concrete error):

```
LexError    :: UnrecognizedCharacter{position}
ParseError  :: UnexpectedToken{expected, found, index}, UnbalancedParentheses{index}, NestingTooDeep
EvalError   :: UnknownOperator{name}, ArityMismatch{operator, expected, got}, TypeMismatch{operator},
               DivisionByZero{operator}, NumericOverflow{operator}, RecursionDepthExceeded
```
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be reported by ErrorHandler. msg is a format string whose
    fields are filled by exprs, exprs[0] being the offending expr (usually the source text). start and end delimit the
    offending part of exprs[0], and are used for diagnosis.
    """
    kind = "Error"

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.template = msg
        self.exprs = list(exprs)
        self.msg = msg.format(*self.exprs)

        self.expr = self.exprs[0] if self.exprs else ""
        self.start = start
        self.end = end if end != -1 else len(self.expr)

        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)

    def colored_msg(self):
        """Same as msg, but with expr snippets bolded."""
        return self.template.format(*(colored(str(expr), attrs=["bold"]) for expr in self.exprs))


class LexError(GenericException):
    """Raised by the tokenizer."""


class ParseError(GenericException):
    """Raised by the parser."""


class EvalError(GenericException):
    """Raised by the evaluator and builtins. Never has a diagnosis: evaluation works on trees, not source text."""


class UnrecognizedCharacter(LexError):
    kind = "UnrecognizedCharacter"

    def __init__(self, source, position):
        self.position = position
        msg = "no token matches {} at position " + str(position)
        super().__init__(msg, [repr(source[position])])

        self.expr = source  # diagnose against the whole source, not the character
        self.start = position
        self.end = position + 1


class UnexpectedToken(ParseError):
    END_OF_INPUT = "end of input"

    kind = "UnexpectedToken"

    def __init__(self, expected, found, index):
        """found is the offending Token, or None at end of input."""
        self.expected = expected
        self.found = found
        self.index = index

        if found is None:
            found_text, start = UnexpectedToken.END_OF_INPUT, -1
        else:
            found_text, start = f"{found.kind} '{found.text}'", found.position

        super().__init__("expected {} but got {} (token " + str(index) + ")", [str(expected), found_text])
        self.expr = ""
        self.start = start
        self.end = start + len(found.text) if found is not None else -1


class UnbalancedParentheses(ParseError):
    kind = "UnbalancedParentheses"

    def __init__(self, index):
        self.index = index
        super().__init__("unbalanced parentheses: input ended at token {}", [str(index)], diagnosis=False)


class NestingTooDeep(ParseError):
    kind = "NestingTooDeep"

    def __init__(self):
        super().__init__("expression is nested too deeply to parse", diagnosis=False)


class UnknownOperator(EvalError):
    kind = "UnknownOperator"

    def __init__(self, name):
        self.name = name
        super().__init__("unknown operator '{}'", [str(name)], diagnosis=False)


class ArityMismatch(EvalError):
    kind = "ArityMismatch"

    def __init__(self, operator, expected, got):
        """expected is a description of the accepted argument count, ex: '2' or 'at least 1'."""
        self.operator = operator
        self.expected = expected
        self.got = got
        super().__init__("'{}' expects {} argument(s), got {}", [operator, str(expected), str(got)], diagnosis=False)


class TypeMismatch(EvalError):
    kind = "TypeMismatch"

    def __init__(self, operator, value=None):
        self.operator = operator
        self.value = value
        super().__init__("'{}' cannot be applied to '{}'", [str(operator), str(value)], diagnosis=False)


class DivisionByZero(EvalError):
    kind = "DivisionByZero"

    def __init__(self, operator):
        self.operator = operator
        super().__init__("'{}' by zero", [operator], diagnosis=False)


class NumericOverflow(EvalError):
    kind = "NumericOverflow"

    def __init__(self, operator):
        self.operator = operator
        super().__init__("'{}' result is too large", [operator], diagnosis=False)


class RecursionDepthExceeded(EvalError):
    kind = "RecursionDepthExceeded"

    def __init__(self):
        super().__init__("maximum recursion depth exceeded during evaluation", diagnosis=False)


class ErrorHandler:
    """Context manager that reports ljsp errors/warnings instead of letting Python tracebacks through."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=False):
        self.fatal = fatal
        self.traceback = {}  # name: source, in the order sources were registered

    def register_source(self, name, source):
        """Registers source under name. Should be called before running a stage on source."""
        self.traceback[name] = source

    def remove_source(self, name):
        """Removes source from traceback. Should be called after a successful run."""
        self.traceback.pop(name, None)

    @property
    def source(self):
        """Most recently registered source, or ''."""
        return next(reversed(self.traceback.values()), "") if self.traceback else ""

    @staticmethod
    def diagnose(expr, start, end, warning=False):
        """Returns expr with expr[start:end] highlighted and bolded, underlined by a caret."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        end = max(end, start + 1)

        diagnosis = "  " + expr[:start]
        diagnosis += colored(expr[start:end], color, attrs=["bold"])
        diagnosis += expr[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def _diagnosis(self, error, warning=False):
        """Diagnosis for error, or None if there is nothing to point at."""
        if error.internal or not error.diagnosis or error.start < 0:
            return None

        expr = error.expr or self.source
        if not expr or error.start >= len(expr):
            return None
        return ErrorHandler.diagnose(expr, error.start, error.end, warning)

    def format(self, error):
        """Returns the full report for error: traceback of sources, kind and message, and diagnosis."""
        error_msg = ""
        for name, source in self.traceback.items():
            error_msg += f"  Source '{name}':\n"
            error_msg += f"    {source}\n"

        if len(self.traceback) > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored(f"{error.kind}: ", ErrorHandler.ERROR, attrs=["bold"]) + error.colored_msg()

        diagnosis = self._diagnosis(error)
        if diagnosis:
            error_msg += "\n" + diagnosis

        return error_msg

    def warn(self, *args, **kwargs):
        """Generates and prints a warning message based on args (same signature as GenericException)."""
        error = GenericException(*args, **kwargs)

        warning_msg = colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.colored_msg()
        print(warning_msg)

        diagnosis = self._diagnosis(error, warning=True)
        if diagnosis:
            print(diagnosis)

    def throw(self, error):
        """Reports error, which must be a GenericException, and exits if fatal."""
        print(self.format(error))

        if self.fatal:
            sys.exit(1)
        self.traceback = {}  # if error occurred, reset traceback (no need if error is fatal)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt", diagnosis=False))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(RecursionDepthExceeded())
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
