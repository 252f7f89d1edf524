"""Built-in formatting rules for placeholder values.

Covers the untyped ``?`` and ``@`` markers as well as the built-in typed
placeholders (``%string``, ``%int``, ``%clamp``, ``%x`` ...). Registered
formatters take precedence over everything here; see registry.py.
"""

import hashlib
import json
import math
import sys
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Union

from pydantic import BaseModel, ConfigDict

from sqlprep.placeholders.base import (
    InvalidArgumentType,
    LengthViolation,
    ModifierSyntaxError,
)
from sqlprep.placeholders.escaping import (
    DEFAULT_QUOTE_CHAR,
    escape,
    mb_trim,
    pack,
    strip_4byte,
)
from sqlprep.placeholders.modifiers import ModifierChain

NULL_KEYWORD = "NULL"

Number = Union[int, float, Decimal]


class ValueKind(str, Enum):
    """Runtime kind of an argument, as seen by the formatters."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    TEXT = "text"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    CALLABLE = "callable"
    OTHER = "other"


SCALAR_KINDS = frozenset(
    {ValueKind.NULL, ValueKind.BOOL, ValueKind.NUMBER, ValueKind.TEXT}
)


def classify(value: Any) -> ValueKind:
    """Return the ValueKind of an argument.

    bool is tested before numbers because it subclasses int.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float, Decimal)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, (list, tuple, set, frozenset)):
        return ValueKind.SEQUENCE
    if isinstance(value, dict):
        return ValueKind.MAPPING
    if callable(value):
        return ValueKind.CALLABLE
    return ValueKind.OTHER


def _kind_name(value: Any) -> str:
    kind = classify(value)
    if kind == ValueKind.OTHER:
        return type(value).__name__
    return kind.value


class FormatContext(BaseModel):
    """Where a value is being formatted, for error reporting and options."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    placeholder: str
    index: int
    name: str = ""
    quote_char: str = DEFAULT_QUOTE_CHAR
    utf8mb4: bool = False

    def type_error(self, value: Any, *expected: str) -> InvalidArgumentType:
        return InvalidArgumentType(
            index=self.index,
            pattern=self.pattern,
            expected=expected,
            actual=_kind_name(value),
            placeholder=self.placeholder,
        )


def format_number(value: Number, context: FormatContext) -> str:
    """Render a number as SQL numeric text. NaN and infinities are rejected."""
    if isinstance(value, float) and not math.isfinite(value):
        raise context.type_error(value, "finite number")
    if isinstance(value, Decimal) and not value.is_finite():
        raise context.type_error(value, "finite number")
    return str(value)


def format_scalar(value: Any, quoted: bool, context: FormatContext) -> str:
    """Format an argument for the untyped ``?`` (quoted) and ``@`` (raw) markers.

    Args:
        value: The argument to format.
        quoted: True for ``?``, which escapes and quotes text.
        context: Formatting context.

    A flat sequence is rendered as its elements joined with ``", "``, each
    element formatted by the same rule, so ``IN (?)`` accepts a list.

    Returns:
        The SQL text for the value.

    Raises:
        InvalidArgumentType: If the value is not text, a number, a bool, None
            or a flat sequence of those.
    """
    kind = classify(value)
    if kind == ValueKind.SEQUENCE:
        return ", ".join(_format_element(v, quoted, context) for v in value)
    return _format_element(value, quoted, context)


def _format_element(value: Any, quoted: bool, context: FormatContext) -> str:
    kind = classify(value)
    if kind == ValueKind.NUMBER:
        return format_number(value, context)
    if kind == ValueKind.BOOL:
        return "1" if value else "0"
    if kind == ValueKind.NULL:
        return NULL_KEYWORD
    if kind == ValueKind.TEXT:
        if quoted:
            return f"{context.quote_char}{escape(value)}{context.quote_char}"
        return value
    raise context.type_error(value, *(k.value for k in SCALAR_KINDS))


def _serialize(value: Any, modifiers: ModifierChain, context: FormatContext) -> Any:
    if modifiers.has("tojson"):
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise context.type_error(value, "JSON serializable value") from e

    if modifiers.has("fromjson"):
        if not isinstance(value, str):
            raise context.type_error(value, ValueKind.TEXT.value)
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError as e:
            raise context.type_error(value, "JSON text") from e
        if isinstance(decoded, str):
            return decoded
        return json.dumps(decoded, ensure_ascii=False, separators=(",", ":"))

    return value


def _check_length(value: str, modifiers: ModifierChain, context: FormatContext) -> str:
    if modifiers.range is None:
        return value

    minimum = modifiers.range.minimum or 0
    maximum = modifiers.range.maximum
    length = len(value)

    if minimum and length < minimum:
        raise LengthViolation(minimum, maximum, length, context.placeholder)
    if maximum and length > maximum:
        if not modifiers.has("crop"):
            raise LengthViolation(minimum, maximum, length, context.placeholder)
        value = value[: int(maximum)]
    return value


def _transform_case(value: str, modifiers: ModifierChain) -> str:
    if modifiers.has("lower"):
        value = value.lower()
    if modifiers.has("upper"):
        value = value.upper()
    if modifiers.has("ucfirst"):
        value = value[:1].upper() + value[1:]
    if modifiers.has("title"):
        value = value.title()
    return value


def _hash(value: str, modifiers: ModifierChain) -> str:
    if modifiers.has("md5"):
        value = hashlib.md5(value.encode("utf-8")).hexdigest()
    for algorithm in ("sha1", "sha256", "sha384", "sha512"):
        if modifiers.has(algorithm):
            value = hashlib.new(algorithm, value.encode("utf-8")).hexdigest()
            break
    return value


def format_text(value: Any, modifiers: ModifierChain, context: FormatContext) -> str:
    """Handle ``%string``, ``%varchar``, ``%char``, ``%text`` and ``%s``.

    Steps, in order: JSON (de)serialization, whitespace trimming or packing,
    empty-to-NULL, length range with optional cropping, 4-byte character
    stripping, case and hash transforms, then escaping and quoting.
    """
    value = _serialize(value, modifiers, context)
    if not isinstance(value, str):
        raise context.type_error(value, ValueKind.TEXT.value)

    if modifiers.has("pack"):
        value = pack(value)
    elif modifiers.has("trim"):
        value = mb_trim(value)

    if modifiers.has("enull") and value == "":
        return NULL_KEYWORD

    value = _check_length(value, modifiers, context)

    if not (context.utf8mb4 or modifiers.has("utf8mb4")):
        value = strip_4byte(value)

    value = _hash(_transform_case(value, modifiers), modifiers)

    if modifiers.escaped:
        value = escape(value)
    if modifiers.quoted:
        value = f"{context.quote_char}{value}{context.quote_char}"
    return value


def _require_number(value: Any, context: FormatContext) -> Number:
    if classify(value) != ValueKind.NUMBER:
        raise context.type_error(value, ValueKind.NUMBER.value)
    return value


def _clamp(value: Number, modifiers: ModifierChain, context: FormatContext) -> Number:
    if modifiers.range is None:
        raise ModifierSyntaxError(
            f"%{context.name}:clamp requires a numeric range, "
            f"eg. %{context.name}:clamp:10 or %{context.name}:clamp:1:10",
            placeholder=context.placeholder,
            pattern=context.pattern,
        )
    minimum = modifiers.range.minimum
    maximum = modifiers.range.maximum
    if minimum is None:
        minimum = 0
    if maximum is None:
        maximum = sys.maxsize
    return min(max(value, minimum), maximum)


def format_numeric(value: Any, modifiers: ModifierChain, context: FormatContext) -> str:
    """Handle ``%int``, ``%float``, ``%id``, ``%bit``, ``%unsigned`` and friends."""
    value = _require_number(value, context)
    if context.name == "unsigned" and value < 0:
        raise context.type_error(value, "unsigned number")
    if modifiers.has("clamp"):
        value = _clamp(value, modifiers, context)
    return format_number(value, context)


def format_clamp(value: Any, modifiers: ModifierChain, context: FormatContext) -> str:
    """Handle ``%clamp:min:max``; the range is mandatory."""
    value = _require_number(value, context)
    if modifiers.range is None:
        raise ModifierSyntaxError(
            "%clamp requires a numeric range, eg. %clamp:1:10, %clamp::100 or %clamp:100",
            placeholder=context.placeholder,
            pattern=context.pattern,
        )
    return format_number(_clamp(value, modifiers, context), context)


def format_hex(value: Any, modifiers: ModifierChain, context: FormatContext) -> str:
    """Handle ``%x``/``%h`` (lowercase) and ``%X``/``%H`` (uppercase) hex output.

    Non-negative integers are rendered as hex digits; text is rendered as
    the hex of its UTF-8 bytes.
    """
    kind = classify(value)
    if kind == ValueKind.NUMBER and isinstance(value, int):
        if value < 0:
            raise context.type_error(value, "non-negative integer")
        digits = format(value, "x")
    elif kind == ValueKind.TEXT:
        digits = value.encode("utf-8").hex()
    else:
        raise context.type_error(value, "integer", ValueKind.TEXT.value)
    return digits.upper() if context.name in ("X", "H") else digits


def format_reserved(value: Any, modifiers: ModifierChain, context: FormatContext) -> str:
    # bool, date, datetime and timestamp have no dedicated rules yet
    if classify(value) in SCALAR_KINDS:
        return format_scalar(value, quoted=False, context=context)
    return str(value)


Formatter = Callable[[Any, ModifierChain, FormatContext], str]

BUILTIN_TYPES: Dict[str, Formatter] = {
    **dict.fromkeys(("string", "varchar", "char", "text"), format_text),
    **dict.fromkeys(
        ("int", "integer", "id", "bit", "byte", "float", "e", "unsigned"),
        format_numeric,
    ),
    "clamp": format_clamp,
    **dict.fromkeys(("h", "H", "x", "X"), format_hex),
    **dict.fromkeys(
        ("bool", "boolean", "date", "datetime", "timestamp"), format_reserved
    ),
}
