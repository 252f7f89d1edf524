"""sqlprep - SQL fragment templating with typed placeholders."""

from sqlprep.placeholders import (
    PlaceholderError,
    Substituter,
    escape,
    quote,
    register_modifier,
    register_type,
    substitute,
)

__version__ = "0.1.0"

__all__ = [
    "PlaceholderError",
    "Substituter",
    "escape",
    "quote",
    "register_modifier",
    "register_type",
    "substitute",
]
