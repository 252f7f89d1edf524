"""Placeholder substitution engine for SQL fragments.

This package turns a pattern with typed placeholders and a list of
positional arguments into a single SQL string, escaping and validating
each value according to its placeholder.

Placeholders:
- `?`: escaped and quoted value (numbers, bools and NULL unquoted)
- `@`: raw value, emitted without escaping or quotes
- `%name:modifiers{args}`: typed value, e.g. `%varchar:trim:crop:50`
- `1..5`, `?..?`: comma separated integer range
- `[...]`: emitted as-is
- `??`, `@@`, `%%` (or `\\?`, `\\@`, `\\%`): literal marker characters

Example:
    >>> from sqlprep.placeholders import substitute
    >>> substitute("SELECT * FROM users WHERE id = ? AND dated = @", 5, "CURDATE()")
    'SELECT * FROM users WHERE id = 5 AND dated = CURDATE()'
"""

from sqlprep.placeholders.base import (
    InvalidArgumentType,
    LengthViolation,
    ModifierSyntaxError,
    NonNullableNull,
    PlaceholderCountMismatch,
    PlaceholderError,
    RegistryFrozenError,
    UnknownPlaceholderType,
)
from sqlprep.placeholders.engine import Substituter, substitute
from sqlprep.placeholders.escaping import escape, escape_like, quote, strip_4byte
from sqlprep.placeholders.modifiers import ModifierChain, ModifierRange, parse_modifiers
from sqlprep.placeholders.registry import (
    TypeRegistry,
    clear_registry,
    get_default_registry,
    list_types,
    register_modifier,
    register_type,
)
from sqlprep.placeholders.tokenizer import Token, TokenKind, tokenize

__all__ = [
    # Engine
    "Substituter",
    "substitute",
    # Errors
    "PlaceholderError",
    "PlaceholderCountMismatch",
    "InvalidArgumentType",
    "NonNullableNull",
    "ModifierSyntaxError",
    "LengthViolation",
    "UnknownPlaceholderType",
    "RegistryFrozenError",
    # Escaping
    "escape",
    "escape_like",
    "quote",
    "strip_4byte",
    # Modifiers
    "ModifierChain",
    "ModifierRange",
    "parse_modifiers",
    # Registry
    "TypeRegistry",
    "get_default_registry",
    "register_type",
    "register_modifier",
    "list_types",
    "clear_registry",
    # Tokenizer
    "Token",
    "TokenKind",
    "tokenize",
]
