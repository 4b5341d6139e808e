"""ljsp expression tree and its recursive-descent parser.

An expression is one of

```
<Expression> ::= <Integer> | <String> | <Symbol>        ; "atoms": integers and strings are self-evaluating
               | (<func> <Expression>*)                 ; "procedure"
               | (lambda (<Symbol>*) <Expression>)      ; "lambda"
               | (quote <token>*)                       ; "quote": stored as normalized raw text
```

Every Expression can regenerate its own source text (generate) and can return a copy of itself with symbols replaced
by other expressions (sub), which is how lambdas are applied. Expressions are never mutated after parsing: sub always
builds new nodes where something changes, so the same Lambda can be applied any number of times.
"""

from abc import abstractmethod, ABC

from ljsp.grammar.lisp import LAMBDA, QUOTE, TokenKind
from ljsp.lang.error import NestingTooDeep, UnbalancedParentheses, UnexpectedToken


class Expression(ABC):
    """Superclass that represents any node of an ljsp expression tree."""

    def __init__(self):
        self._cls = type(self).__name__

    @abstractmethod
    def generate(self):
        """This method should return the source text of this expression."""

    @abstractmethod
    def sub(self, bindings):
        """Given bindings (dict of symbol name: Expression), this method should return this expression with every free
        occurence of those symbols replaced. Unchanged subtrees may be shared between the result and self.
        """

    @property
    def nodes(self):
        """Child expressions, in source order."""
        return []

    def display(self, indents=0):
        """Recursively displays expression tree with readable format.

        Format:
        <Expression>(expr='<expr>', nodes=[
            <Expression>(expr='<expr>', nodes=[
                ...
                <Expression>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{self._cls}(expr='{self.generate()}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __repr__(self):
        return f"{self._cls}('{self.generate()}')"

    def __str__(self):
        return self.display()

    def __hash__(self):
        return hash((self._cls, tuple(self.nodes)))


class Atom(Expression):
    """Leaf expression holding a single value."""

    def __init__(self, value):
        super().__init__()
        self.value = value

    def sub(self, bindings):
        return self

    def __eq__(self, other):
        return type(other) is type(self) and other.value == self.value

    def __hash__(self):
        return hash((self._cls, self.value))


class Integer(Atom):
    """Numeric literal. Despite the name, decimal literals (2.5) are Integers too: the lexer makes no distinction. text
    is the literal as written (007, 2.50), kept so generation reproduces it; values built during evaluation have none.
    """

    def __init__(self, value, text=None):
        super().__init__(value)
        self.text = text

    def generate(self):
        return self.text if self.text is not None else str(self.value)


class String(Atom):

    def generate(self):
        return f"\"{self.value}\""


class Symbol(Atom):
    """Names an operator or a lambda parameter. Anywhere else a symbol evaluates to its own name."""

    def generate(self):
        return self.value

    def sub(self, bindings):
        return bindings.get(self.value, self)


class Procedure(Expression):
    """Call form: (func arg1 arg2 ...). Arity is only checked when the call is evaluated."""

    def __init__(self, func, args):
        super().__init__()
        self.func = func
        self.args = list(args)

    def generate(self):
        if not self.args:
            return f"({self.func.generate()})"
        return f"({self.func.generate()} {' '.join(arg.generate() for arg in self.args)})"

    def sub(self, bindings):
        return Procedure(self.func.sub(bindings), [arg.sub(bindings) for arg in self.args])

    @property
    def nodes(self):
        return [self.func] + self.args

    def __eq__(self, other):
        return isinstance(other, Procedure) and other.func == self.func and other.args == self.args

    def __hash__(self):
        return super().__hash__()


class Lambda(Expression):
    """(lambda (p1 p2 ...) body). Parameter names are not checked for duplicates."""
    PARAM_SEPARATOR = " "

    def __init__(self, params, body):
        super().__init__()
        self.params = list(params)
        self.body = body

    def generate(self):
        return f"({LAMBDA} ({Lambda.PARAM_SEPARATOR.join(self.params)}) {self.body.generate()})"

    def sub(self, bindings):
        # parameters shadow any outer binding of the same name
        inner = {name: node for name, node in bindings.items() if name not in self.params}
        if not inner:
            return self
        return Lambda(self.params, self.body.sub(inner))

    @property
    def nodes(self):
        return [Symbol(param) for param in self.params] + [self.body]

    def __eq__(self, other):
        return isinstance(other, Lambda) and other.params == self.params and other.body == self.body

    def __hash__(self):
        return super().__hash__()


class Quote(Expression):
    """(quote ...): the quoted tokens are kept as raw text and never parsed into a tree."""

    def __init__(self, text):
        super().__init__()
        self.text = text

    def generate(self):
        return f"({QUOTE} {self.text})"

    def sub(self, bindings):
        return self

    def __eq__(self, other):
        return isinstance(other, Quote) and other.text == self.text

    def __hash__(self):
        return hash((self._cls, self.text))


class Parser:
    """Recursive-descent parser over a list of Tokens. The list is drained from the front as the parse proceeds, and
    tokens after the first complete expression are left in it.
    """

    def __init__(self, tokens):
        self.tokens = tokens
        self.consumed = 0  # index of the next token in the original list, used for errors

    def parse(self):
        """Parses a single top-level expression. Nesting past the Python recursion limit raises NestingTooDeep."""
        try:
            return self.parse_expr()
        except RecursionError:
            raise NestingTooDeep()

    def parse_expr(self):
        if self.peek() is TokenKind.OPEN_PAREN:
            return self.parse_list()
        return self.parse_atom()

    def parse_atom(self):
        kind = self.peek()
        if kind is TokenKind.INTEGER:
            token = self.consume(TokenKind.INTEGER)
            return Integer(token.value, token.text)
        if kind is TokenKind.STRING:
            return String(self.consume(TokenKind.STRING).value)
        return Symbol(self.consume(TokenKind.SYMBOL).value)

    def parse_list(self):
        """Dispatches on the token after the open paren: special forms first, then procedure calls."""
        second = self.lookahead(1)
        if second is not None and second.is_symbol(LAMBDA):
            return self.parse_lambda()
        if second is not None and second.is_symbol(QUOTE):
            return self.parse_quote()
        return self.parse_procedure()

    def parse_lambda(self):
        self.consume(TokenKind.OPEN_PAREN)
        self.consume(TokenKind.SYMBOL)
        self.consume(TokenKind.OPEN_PAREN)

        params = []
        while self.peek() is not TokenKind.CLOSE_PAREN:
            params.append(self.consume(TokenKind.SYMBOL).value)
        self.consume(TokenKind.CLOSE_PAREN)

        body = self.parse_expr()
        self.consume(TokenKind.CLOSE_PAREN)

        return Lambda(params, body)

    def parse_quote(self):
        """Collects the raw text of every token up to the quote's own close paren. Nested lists are captured whole."""
        self.consume(TokenKind.OPEN_PAREN)
        self.consume(TokenKind.SYMBOL)

        quoted = []
        depth = 0
        while True:
            kind = self.peek()
            if kind is TokenKind.CLOSE_PAREN and depth == 0:
                break
            if kind is TokenKind.OPEN_PAREN:
                depth += 1
            elif kind is TokenKind.CLOSE_PAREN:
                depth -= 1
            quoted.append(self.advance().text)

        self.consume(TokenKind.CLOSE_PAREN)

        # a single pass each: only the first "( " and the first " )" are collapsed
        text = " ".join(quoted).replace("( ", "(", 1).replace(" )", ")", 1)
        return Quote(text)

    def parse_procedure(self):
        self.consume(TokenKind.OPEN_PAREN)

        if self.peek() is TokenKind.OPEN_PAREN:
            func = self.parse_list()
        else:
            func = Symbol(self.consume(TokenKind.SYMBOL).value)

        args = []
        while self.peek() is not TokenKind.CLOSE_PAREN:
            args.append(self.parse_expr())
        self.consume(TokenKind.CLOSE_PAREN)

        return Procedure(func, args)

    def lookahead(self, offset=0):
        """Token at offset from the front, or None if there is none."""
        return self.tokens[offset] if offset < len(self.tokens) else None

    def peek(self):
        """Kind of the next token. Running out of tokens mid-expression means a close paren is missing."""
        if not self.tokens:
            raise UnbalancedParentheses(self.consumed)
        return self.tokens[0].kind

    def advance(self):
        """Removes and returns the next token, whatever its kind."""
        self.peek()
        self.consumed += 1
        return self.tokens.pop(0)

    def consume(self, expected):
        """Removes and returns the next token, which must be of kind expected."""
        if not self.tokens:
            if expected is TokenKind.CLOSE_PAREN:
                raise UnbalancedParentheses(self.consumed)
            raise UnexpectedToken(expected, None, self.consumed)

        token = self.tokens[0]
        if token.kind is not expected:
            raise UnexpectedToken(expected, token, self.consumed)
        return self.advance()
