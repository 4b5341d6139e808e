"""Lexical analysis for ljsp: turns source text into an ordered list of Tokens. See grammar/lisp.py for the patterns
and their priority.
"""

from ljsp.grammar.lisp import PATTERNS, SKIPPABLE, Token
from ljsp.lang.error import UnrecognizedCharacter


class Tokenizer:
    """Owns a source string and a cursor into it. Every call to tokenize starts over from the beginning."""

    def __init__(self, source):
        self.source = source
        self.pos = 0

    def eof(self):
        return self.pos >= len(self.source)

    def skip(self):
        """Skips spaces at the cursor. Other whitespace is not skippable and will fail to match any token."""
        while not self.eof() and self.source[self.pos] == SKIPPABLE:
            self.pos += 1

    def next_token(self):
        """Matches the first pattern (in priority order) anchored at the cursor and advances past it. Raises
        UnrecognizedCharacter if nothing matches.
        """
        for kind, pattern in PATTERNS:
            match = pattern.match(self.source, self.pos)
            if match and match.end() > self.pos:
                token = Token.from_match(kind, match, self.pos)
                self.pos = match.end()
                return token

        raise UnrecognizedCharacter(self.source, self.pos)

    def tokenize(self):
        """Returns every token in self.source, in order."""
        self.pos = 0
        tokens = []

        self.skip()
        while not self.eof():
            tokens.append(self.next_token())
            self.skip()

        return tokens
