"""Pattern tokenizer.

Splits a pattern into a forward-only stream of tokens in one regex
sweep. Literal text between placeholders is yielded as LITERAL tokens,
so joining the ``text`` of every token reproduces the pattern exactly.
"""

import re
from enum import Enum
from typing import Iterator, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class TokenKind(str, Enum):
    """Kind of token produced by the tokenizer."""

    LITERAL = "literal"  # plain pattern text
    ESCAPE = "escape"  # ??, \?, @@, \@, %%, \%
    AS_IS = "as_is"  # [...], emitted verbatim
    QUOTED = "quoted"  # ?
    RAW = "raw"  # @
    TYPED = "typed"  # %name:modifiers{arguments}
    RANGE = "range"  # 1..10, ?..?


# Shorthand names and the built-in type they stand for
SHORTHANDS = {
    "s": "string",
    "d": "int",
    "u": "unsigned",
    "f": "float",
    "h": "h",
    "H": "H",
    "x": "x",
    "X": "X",
}

_TOKEN_RE = re.compile(
    r"""
      (?P<escape>\?\?|\\\?|@@|\\@|%%|\\%)
    | (?P<range>(?<![\w.])(?:\?|\d+)\.\.(?:\?|\d+)(?![\w.]))
    | (?P<quoted>\?)
    | (?P<raw>@(?![a-zA-Z]))
    | %(?P<name>[a-zA-Z][a-zA-Z0-9_]*)
        (?P<chain>(?::+[a-z0-9.\-]+)*)
        (?:\{(?P<arguments>[^{}]+)\})?
    | (?P<as_is>\[[^\[\]]*\])
    """,
    re.VERBOSE,
)


class Token(BaseModel):
    """One lexical unit of a pattern."""

    model_config = ConfigDict(frozen=True)

    kind: TokenKind
    text: str = Field(..., description="Exact source text of the token")
    position: int = Field(..., description="Offset of the token in the pattern")
    name: Optional[str] = Field(
        None, description="Type name for TYPED tokens, shorthands resolved"
    )
    chain: Optional[str] = Field(None, description="Modifier chain for TYPED tokens")
    arguments: Optional[str] = Field(
        None, description="Brace block content for TYPED tokens"
    )

    @property
    def literal(self) -> Optional[str]:
        """Text emitted for tokens that consume no argument, else None."""
        if self.kind in (TokenKind.LITERAL, TokenKind.AS_IS):
            return self.text
        if self.kind == TokenKind.ESCAPE:
            return self.text[-1]
        return None

    @property
    def bounds(self) -> Tuple[str, str]:
        """The (start, end) parts of a RANGE token, each a digit string or '?'."""
        start, _, end = self.text.partition("..")
        return start, end

    @property
    def consumes(self) -> int:
        """Number of data arguments this token takes from the argument list."""
        if self.kind in (TokenKind.QUOTED, TokenKind.RAW, TokenKind.TYPED):
            return 1
        if self.kind == TokenKind.RANGE:
            return self.bounds.count("?")
        return 0


def tokenize(pattern: str) -> Iterator[Token]:
    """Yield the tokens of a pattern from left to right.

    Recognized, in priority order: escaped markers, range generators,
    the quoted-value marker ``?``, the raw-value marker ``@`` (only when
    not followed by a letter), typed placeholders ``%name(:mod)*({args})?``
    and bracketed as-is blocks.

    Args:
        pattern: The pattern to scan.

    Yields:
        Token objects covering the whole pattern.
    """
    offset = 0
    for match in _TOKEN_RE.finditer(pattern):
        start = match.start()
        if start > offset:
            yield Token(
                kind=TokenKind.LITERAL, text=pattern[offset:start], position=offset
            )
        offset = match.end()

        if match.group("name") is not None:
            name = match.group("name")
            yield Token(
                kind=TokenKind.TYPED,
                text=match.group(0),
                position=start,
                name=SHORTHANDS.get(name, name),
                chain=match.group("chain") or None,
                arguments=match.group("arguments"),
            )
        else:
            # The remaining alternatives have no nested groups
            kind = TokenKind(match.lastgroup)
            yield Token(kind=kind, text=match.group(0), position=start)

    if offset < len(pattern):
        yield Token(kind=TokenKind.LITERAL, text=pattern[offset:], position=offset)
