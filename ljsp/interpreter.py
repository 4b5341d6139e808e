"""ljsp: a minimal Lisp front end and interpreter.

Basic program flow:
    1. Tokenizer: source text -> list of Tokens (see ljsp/grammar/lisp.py for the token grammar)
    2. Parser: list of Tokens -> one expression tree (see ljsp/syntax/lexical.py)
    3. Either, independently, over the same tree:
        - Generation: expression tree -> source text
        - Evaluation: expression tree -> value, using the fixed builtins in ljsp/lang/numerical.py

Each stage is its own function below so that it can be called and tested on its own. Errors abort the stage that raised
them; see ljsp/lang/error.py.
"""

from ljsp.lang.error import ErrorHandler
from ljsp.lang.evaluator import Evaluator
from ljsp.syntax.lexical import Parser
from ljsp.syntax.tokenizer import Tokenizer

SOURCE_NAME = "<in>"  # name sources are registered under in error reports


def tokenize(source):
    """Returns the list of Tokens in source."""
    return Tokenizer(source).tokenize()


def parse(tokens):
    """Parses one expression from the front of tokens, draining the list. Accepts source text for convenience."""
    if isinstance(tokens, str):
        tokens = tokenize(tokens)
    return Parser(tokens).parse()


def generate(tree):
    """Returns the source text of an expression tree."""
    return tree.generate()


def evaluate(tree):
    """Evaluates an expression tree. Accepts source text for convenience."""
    if isinstance(tree, str):
        tree = parse(tree)
    return Evaluator().run(tree)


def run(source, error_handler=None):
    """Tokenizes, parses and evaluates source, reporting errors through error_handler instead of raising them. Returns
    the value, or None if an error was reported. Tokens left after the first complete expression are ignored with a
    warning.
    """
    if error_handler is None:
        error_handler = ErrorHandler()

    result = None
    with error_handler:
        error_handler.register_source(SOURCE_NAME, source)

        tokens = tokenize(source)
        tree = Parser(tokens).parse()
        if tokens:
            start = tokens[0].position
            msg = "'{}' continues after its first expression, the rest is ignored"
            error_handler.warn(msg, source, start=start, end=len(source))

        result = Evaluator().run(tree)
        error_handler.remove_source(SOURCE_NAME)

    return result
