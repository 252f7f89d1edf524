"""Tests for built-in formatters."""

from decimal import Decimal

import pytest

from sqlprep.placeholders.base import (
    InvalidArgumentType,
    LengthViolation,
    ModifierSyntaxError,
)
from sqlprep.placeholders.formatters import (
    BUILTIN_TYPES,
    FormatContext,
    ValueKind,
    classify,
    format_clamp,
    format_hex,
    format_numeric,
    format_scalar,
    format_text,
)
from sqlprep.placeholders.modifiers import parse_modifiers


def context(name="string", placeholder="%string", **kwargs):
    return FormatContext(
        pattern=f"x = {placeholder}",
        placeholder=placeholder,
        index=0,
        name=name,
        **kwargs,
    )


class TestClassify:
    """Tests for classify function."""

    @pytest.mark.parametrize(
        "value,kind",
        [
            (None, ValueKind.NULL),
            (True, ValueKind.BOOL),
            (False, ValueKind.BOOL),
            (0, ValueKind.NUMBER),
            (1.5, ValueKind.NUMBER),
            (Decimal("2.50"), ValueKind.NUMBER),
            ("text", ValueKind.TEXT),
            ([1, 2], ValueKind.SEQUENCE),
            ((1,), ValueKind.SEQUENCE),
            ({"a": 1}, ValueKind.MAPPING),
            (len, ValueKind.CALLABLE),
            (object(), ValueKind.OTHER),
        ],
    )
    def test_classify(self, value, kind):
        """Test the kind assigned to each runtime type."""
        assert classify(value) == kind

    def test_bool_is_not_number(self):
        """Test that bool is checked before int."""
        assert classify(True) != ValueKind.NUMBER


class TestFormatScalar:
    """Tests for format_scalar function."""

    @pytest.mark.parametrize("quoted", [True, False])
    def test_shared_rules(self, quoted):
        """Test rules that are the same for ? and @."""
        ctx = context()
        assert format_scalar(7, quoted, ctx) == "7"
        assert format_scalar(2.5, quoted, ctx) == "2.5"
        assert format_scalar(True, quoted, ctx) == "1"
        assert format_scalar(False, quoted, ctx) == "0"
        assert format_scalar(None, quoted, ctx) == "NULL"

    def test_text_quoted(self):
        """Test that quoted text is escaped and quoted."""
        assert format_scalar("it's", True, context()) == '"it\\\'s"'

    def test_text_raw(self):
        """Test that raw text is passed through."""
        assert format_scalar("NOW()", False, context()) == "NOW()"

    def test_custom_quote_char(self):
        """Test that the context quote character is used."""
        assert format_scalar("a", True, context(quote_char="'")) == "'a'"

    def test_sequence_joined(self):
        """Test that a flat sequence is joined element by element."""
        assert format_scalar([1, "a", None, True], True, context()) == (
            '1, "a", NULL, 1'
        )
        assert format_scalar(("x", "y"), False, context()) == "x, y"

    def test_nested_sequence_rejected(self):
        """Test that a nested sequence raises InvalidArgumentType."""
        with pytest.raises(InvalidArgumentType) as exc_info:
            format_scalar([1, [2, 3]], True, context())
        assert exc_info.value.actual == "sequence"
        assert "text" in exc_info.value.expected

    def test_mapping_rejected(self):
        """Test that a mapping raises InvalidArgumentType."""
        with pytest.raises(InvalidArgumentType) as exc_info:
            format_scalar({"a": 1}, True, context())
        assert exc_info.value.actual == "mapping"

    def test_invalid_argument_type_is_type_error(self):
        """Test that InvalidArgumentType can be caught as TypeError."""
        with pytest.raises(TypeError):
            format_scalar(object(), False, context())

    def test_non_finite_float_rejected(self):
        """Test that NaN cannot be rendered."""
        with pytest.raises(InvalidArgumentType):
            format_scalar(float("nan"), True, context())


class TestFormatText:
    """Tests for format_text function."""

    def test_requires_text(self):
        """Test that a number is rejected by a text type."""
        with pytest.raises(InvalidArgumentType):
            format_text(5, parse_modifiers(None), context())

    def test_min_length(self):
        """Test that a short value violates the minimum."""
        with pytest.raises(LengthViolation) as exc_info:
            format_text("ab", parse_modifiers(":3:10"), context())
        assert exc_info.value.minimum == 3
        assert exc_info.value.maximum == 10
        assert exc_info.value.length == 2

    def test_crop(self):
        """Test that crop truncates to exactly the maximum."""
        result = format_text("abcdefgh", parse_modifiers(":crop:5"), context())
        assert result == '"abcde"'

    def test_case_then_hash(self):
        """Test that case transforms run before hashing."""
        result = format_text("ABC", parse_modifiers(":lower:md5"), context())
        assert result == '"900150983cd24fb0d6963f7d28e17f72"'

    def test_ucfirst(self):
        """Test the ucfirst transform."""
        assert format_text("hello", parse_modifiers(":ucfirst"), context()) == (
            '"Hello"'
        )

    def test_title(self):
        """Test the ucwords transform."""
        result = format_text("hello world", parse_modifiers(":ucwords"), context())
        assert result == '"Hello World"'

    def test_context_utf8mb4(self):
        """Test that the context can keep 4-byte characters."""
        ctx = context(utf8mb4=True)
        assert format_text("\U0001f600", parse_modifiers(None), ctx) == (
            '"\U0001f600"'
        )


class TestFormatNumeric:
    """Tests for numeric formatters."""

    def test_requires_number(self):
        """Test that text is rejected."""
        with pytest.raises(InvalidArgumentType):
            format_numeric("5", parse_modifiers(None), context("int", "%int"))

    def test_clamp_default_min(self):
        """Test that a single clamp bound is the maximum with minimum 0."""
        ctx = context("int", "%int:clamp:10")
        assert format_numeric(-3, parse_modifiers(":clamp:10"), ctx) == "0"
        assert format_numeric(30, parse_modifiers(":clamp:10"), ctx) == "10"

    def test_clamp_without_range(self):
        """Test that :clamp without bounds is a syntax error."""
        with pytest.raises(ModifierSyntaxError):
            format_numeric(3, parse_modifiers(":clamp"), context("int", "%int:clamp"))

    def test_range_ignored_without_clamp(self):
        """Test that a range on a numeric type only applies with :clamp."""
        ctx = context("int", "%int:10")
        assert format_numeric(50, parse_modifiers(":10"), ctx) == "50"

    def test_unsigned_rejects_negative(self):
        """Test the unsigned type."""
        with pytest.raises(InvalidArgumentType):
            format_numeric(-1, parse_modifiers(None), context("unsigned", "%u"))

    def test_clamp_type_requires_range(self):
        """Test that %clamp without a range fails."""
        with pytest.raises(ModifierSyntaxError):
            format_clamp(3, parse_modifiers(None), context("clamp", "%clamp"))

    def test_clamp_empty_min(self):
        """Test that an empty minimum defaults to zero."""
        ctx = context("clamp", "%clamp::5")
        assert format_clamp(10**6, parse_modifiers("::5"), ctx) == "5"
        assert format_clamp(-10, parse_modifiers("::5"), ctx) == "0"


class TestFormatHex:
    """Tests for format_hex function."""

    def test_integer(self):
        """Test lower and upper case hex for integers."""
        assert format_hex(255, parse_modifiers(None), context("x", "%x")) == "ff"
        assert format_hex(255, parse_modifiers(None), context("X", "%X")) == "FF"

    def test_text(self):
        """Test hex of text bytes."""
        assert format_hex("AB", parse_modifiers(None), context("h", "%h")) == "4142"

    def test_negative_rejected(self):
        """Test that negative integers have no hex rendering."""
        with pytest.raises(InvalidArgumentType) as exc_info:
            format_hex(-255, parse_modifiers(None), context("X", "%X"))
        assert "non-negative integer" in exc_info.value.expected

    def test_zero(self):
        """Test that zero is a valid hex value."""
        assert format_hex(0, parse_modifiers(None), context("x", "%x")) == "0"

    def test_float_rejected(self):
        """Test that floats cannot be rendered as hex."""
        with pytest.raises(InvalidArgumentType):
            format_hex(1.5, parse_modifiers(None), context("x", "%x"))


class TestBuiltinTypes:
    """Tests for the BUILTIN_TYPES table."""

    @pytest.mark.parametrize("name", ["string", "varchar", "char", "text"])
    def test_text_types(self, name):
        assert BUILTIN_TYPES[name] is format_text

    @pytest.mark.parametrize(
        "name", ["int", "integer", "id", "bit", "byte", "float", "unsigned"]
    )
    def test_numeric_types(self, name):
        assert BUILTIN_TYPES[name] is format_numeric

    def test_reserved_types_present(self):
        for name in ("bool", "boolean", "date", "datetime", "timestamp"):
            assert name in BUILTIN_TYPES
