"""Token grammar for ljsp, a minimal Lisp.

Formally, ljsp source can be defined as

```
<expr>      ::= <atom>
              | "(" "lambda" "(" <symbol>* ")" <expr> ")"   ; "lambda"
              | "(" "quote" <token>* ")"                    ; "quote": raw text, never parsed further
              | "(" <operator> <expr>* ")"                  ; "procedure call"
<operator>  ::= <symbol> | "(" ... ")"                      ; nested forms allow ((lambda (x) x) 1)
<atom>      ::= <integer> | <string> | <symbol>
```

Tokens are matched in priority order: the first pattern that matches wins, so digit-leading text is an
<integer> even though the <symbol> charset contains digits.
"""

from dataclasses import dataclass, field
from enum import Enum
import re


class TokenKind(Enum):
    OPEN_PAREN = "OpenParen"
    CLOSE_PAREN = "CloseParen"
    INTEGER = "Integer"
    STRING = "String"
    SYMBOL = "Symbol"

    def __str__(self):
        return self.value


# priority order matters
PATTERNS = [
    (TokenKind.OPEN_PAREN, re.compile(r"\(")),
    (TokenKind.CLOSE_PAREN, re.compile(r"\)")),
    (TokenKind.INTEGER, re.compile(r"-?[0-9]+(\.[0-9]+)?")),
    (TokenKind.STRING, re.compile(r"\"([^\"]*)\"")),
    (TokenKind.SYMBOL, re.compile(r"[a-zA-Z0-9+=!^%*\-/]+")),
]

SKIPPABLE = " "  # only the ASCII space: tabs and newlines are not ljsp whitespace

LAMBDA = "lambda"
QUOTE = "quote"


@dataclass(frozen=True)
class Token:
    """A single lexed token. value is numeric for integers and unquoted for strings, while text is always the exact
    source slice (used by quote, which preserves raw text). position is the offset of text in the source.
    """
    kind: TokenKind
    value: object
    text: str = field(compare=False)
    position: int = field(default=-1, compare=False)

    @classmethod
    def from_match(cls, kind, match, position):
        """Builds a Token from a regex match of the pattern for kind."""
        text = match.group(0)
        if kind is TokenKind.INTEGER:
            value = float(text) if match.group(1) else int(text)
        elif kind is TokenKind.STRING:
            value = match.group(1)
        else:
            value = text
        return cls(kind, value, text, position)

    def is_symbol(self, name):
        return self.kind is TokenKind.SYMBOL and self.value == name

    def __repr__(self):
        return f"Token({self.kind}, {self.value!r})"
