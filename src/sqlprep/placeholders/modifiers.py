"""Parser for the modifier chain attached to typed placeholders.

A typed placeholder such as ``%varchar:trim:crop:8:100`` carries the
chain ``:trim:crop:8:100``. The chain is split into named flags
(``trim``, ``crop``) and at most one numeric range (``8:100``).
A brace block (``%int{clamp:1:10}``) is appended to the chain as one
more colon-delimited segment.
"""

import re
from typing import Dict, FrozenSet, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from sqlprep.placeholders.base import ModifierSyntaxError

Number = Union[int, float]

# Alias -> canonical flag name
FLAG_ALIASES: Dict[str, str] = {
    "n": "nullable",
    "null": "nullable",
    "nullable": "nullable",
    "noquot": "noquote",
    "noquote": "noquote",
    "noescape": "noescape",
    "raw": "raw",
    "trim": "trim",
    "pack": "pack",
    "upper": "upper",
    "toupper": "upper",
    "ucase": "upper",
    "lower": "lower",
    "tolower": "lower",
    "lcase": "lower",
    "ucfirst": "ucfirst",
    "ucwords": "title",
    "title": "title",
    "md5": "md5",
    "sha": "sha1",
    "sha1": "sha1",
    "sha256": "sha256",
    "sha384": "sha384",
    "sha512": "sha512",
    "crop": "crop",
    "utf8mb4": "utf8mb4",
    "noclean": "utf8mb4",
    "clamp": "clamp",
    "enull": "enull",
    "json": "tojson",
    "tojson": "tojson",
    "jsonify": "tojson",
    "jsonencode": "tojson",
    "fromjson": "fromjson",
    "jsondecode": "fromjson",
}

KNOWN_FLAGS: FrozenSet[str] = frozenset(FLAG_ALIASES.values())

_NUMERIC_START_RE = re.compile(r"^[-+.0-9]")
_INT_RE = re.compile(r"^[-+]?[0-9]+$")
_FLOAT_RE = re.compile(r"^[-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)$")


class ModifierRange(BaseModel):
    """Numeric bounds parsed from a modifier chain.

    A bound of None means the chain left it empty (``::10``) and the
    consumer applies its own default.
    """

    model_config = ConfigDict(frozen=True)

    minimum: Optional[Number] = None
    maximum: Optional[Number] = None


class ModifierChain(BaseModel):
    """Structured form of a typed placeholder's modifier suffix."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(default="", description="Chain as written, e.g. ':trim:8:100'")
    flags: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Canonical flag names; unknown tokens are kept verbatim",
    )
    range: Optional[ModifierRange] = Field(
        default=None, description="Numeric range, if the chain declares one"
    )
    arguments: Optional[str] = Field(
        default=None, description="Raw content of the {...} block"
    )

    def has(self, *names: str) -> bool:
        """Return True if any of the given flags (or aliases) is present."""
        return any(FLAG_ALIASES.get(name, name) in self.flags for name in names)

    def unknown_flags(self) -> FrozenSet[str]:
        """Return the flags no built-in handler recognizes."""
        return self.flags - KNOWN_FLAGS

    @property
    def nullable(self) -> bool:
        return "nullable" in self.flags

    @property
    def quoted(self) -> bool:
        return not self.flags & {"noquote", "raw"}

    @property
    def escaped(self) -> bool:
        return not self.flags & {"noescape", "raw"}


def _parse_bound(
    token: str,
    placeholder: Optional[str],
    pattern: Optional[str],
    position: Optional[int],
) -> Optional[Number]:
    if token == "":
        return None
    if _INT_RE.match(token):
        return int(token)
    if _FLOAT_RE.match(token):
        return float(token)
    raise ModifierSyntaxError(
        f"Invalid numeric range bound `{token}`; ranges look like :10, :8:50 or ::50",
        placeholder=placeholder,
        pattern=pattern,
        position=position,
    )


def parse_modifiers(
    chain: Optional[str] = None,
    arguments: Optional[str] = None,
    placeholder: Optional[str] = None,
    pattern: Optional[str] = None,
    position: Optional[int] = None,
) -> ModifierChain:
    """Parse a modifier chain into flags and an optional numeric range.

    Args:
        chain: Colon-delimited suffix, e.g. ``":trim:crop:8:100"``.
        arguments: Content of the brace block, without the braces.
        placeholder: Full placeholder text, used in error messages.
        pattern: Pattern the placeholder came from, used in error messages.
        position: Offset of the placeholder in the pattern.

    Returns:
        The parsed ModifierChain.

    Raises:
        ModifierSyntaxError: If a range bound is not numeric, or the chain
            declares more than one range or more than two bounds.
    """
    chain = chain or ""
    text = chain
    if arguments:
        text = f"{chain}:{arguments}"

    tokens = text.split(":")
    if tokens and tokens[0] == "":
        tokens = tokens[1:]

    flags = set()
    bounds: List[str] = []
    range_closed = False

    for i, token in enumerate(tokens):
        lowered = token.lower()
        next_token = tokens[i + 1] if i + 1 < len(tokens) else ""
        is_bound = bool(_NUMERIC_START_RE.match(token)) or (
            token == "" and bool(_NUMERIC_START_RE.match(next_token))
        )

        if is_bound:
            if range_closed:
                raise ModifierSyntaxError(
                    "Only one numeric range is allowed per placeholder",
                    placeholder=placeholder,
                    pattern=pattern,
                    position=position,
                )
            bounds.append(token)
            continue

        if bounds:
            range_closed = True
        if lowered:
            flags.add(FLAG_ALIASES.get(lowered, lowered))

    modifier_range = None
    if bounds:
        if len(bounds) > 2:
            raise ModifierSyntaxError(
                f"Numeric range `{':'.join(bounds)}` has more than two bounds",
                placeholder=placeholder,
                pattern=pattern,
                position=position,
            )
        parsed = [_parse_bound(b, placeholder, pattern, position) for b in bounds]
        if len(parsed) == 1:
            modifier_range = ModifierRange(minimum=None, maximum=parsed[0])
        else:
            modifier_range = ModifierRange(minimum=parsed[0], maximum=parsed[1])

    return ModifierChain(
        text=text,
        flags=frozenset(flags),
        range=modifier_range,
        arguments=arguments,
    )
