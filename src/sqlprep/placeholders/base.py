"""Exception classes for the placeholder engine.

Every failure raised while substituting a pattern derives from
PlaceholderError, so callers can catch the whole family in one place.
"""

from typing import Iterable, Optional


class PlaceholderError(Exception):
    """Base exception for all placeholder substitution failures."""

    pass


class PlaceholderCountMismatch(PlaceholderError):
    """Raised when the number of consumed placeholders differs from the arguments.

    Attributes:
        pattern: The pattern being substituted.
        expected: Number of arguments the pattern consumed.
        supplied: Number of arguments the caller supplied.
        delta: Absolute difference between the two counts.
    """

    def __init__(self, pattern: str, expected: int, supplied: int):
        self.pattern = pattern
        self.expected = expected
        self.supplied = supplied
        self.delta = abs(expected - supplied)
        if expected > supplied:
            hint = f"possibly requiring {self.delta} more value(s)"
        else:
            hint = f"{self.delta} value(s) left unused"
        super().__init__(
            f"Invalid number of parameters ({supplied}) supplied to pattern "
            f"`{pattern}`; expected {expected}, {hint}"
        )


class InvalidArgumentType(PlaceholderError, TypeError):
    """Raised when an argument's kind is not accepted by its placeholder."""

    def __init__(
        self,
        index: int,
        pattern: str,
        expected: Iterable[str],
        actual: str,
        placeholder: Optional[str] = None,
    ):
        self.index = index
        self.pattern = pattern
        self.expected = frozenset(expected)
        self.actual = actual
        self.placeholder = placeholder
        where = f" for `{placeholder}`" if placeholder else ""
        super().__init__(
            f"Invalid data type `{actual}` given at index {index}{where} in pattern "
            f"`{pattern}`; expected one of: {', '.join(sorted(self.expected))}"
        )


class NonNullableNull(PlaceholderError):
    """Raised when None is supplied to a placeholder without an allow-null flag."""

    def __init__(self, index: int, placeholder: str):
        self.index = index
        self.placeholder = placeholder
        super().__init__(
            f"NULL value detected for a non-nullable field at index {index} "
            f"for `{placeholder}`; add `:n` or `:null` to allow NULL"
        )


class ModifierSyntaxError(PlaceholderError):
    """Raised when a modifier chain contains a malformed numeric range."""

    def __init__(
        self,
        message: str,
        placeholder: Optional[str] = None,
        pattern: Optional[str] = None,
        position: Optional[int] = None,
    ):
        self.placeholder = placeholder
        self.pattern = pattern
        self.position = position
        details = []
        if placeholder is not None:
            details.append(f"in `{placeholder}`")
        if position is not None:
            details.append(f"at position {position}")
        if pattern is not None:
            details.append(f"of pattern `{pattern}`")
        suffix = f" ({' '.join(details)})" if details else ""
        super().__init__(f"{message}{suffix}")


class LengthViolation(PlaceholderError):
    """Raised when a text value is shorter or longer than its declared range."""

    def __init__(
        self,
        minimum: Optional[float],
        maximum: Optional[float],
        length: int,
        placeholder: str,
    ):
        self.minimum = minimum
        self.maximum = maximum
        self.length = length
        self.placeholder = placeholder
        if minimum and length < minimum:
            detail = f"requires at least {minimum} characters, got {length}"
        else:
            detail = (
                f"allows at most {maximum} characters, got {length}; "
                "add `:crop` to truncate instead"
            )
        super().__init__(f"Invalid string length for `{placeholder}`: {detail}")


class UnknownPlaceholderType(PlaceholderError):
    """Raised when a typed placeholder names a type nobody handles."""

    def __init__(self, name: str, pattern: str):
        self.name = name
        self.pattern = pattern
        super().__init__(
            f"Unknown placeholder type `%{name}` in pattern `{pattern}`. "
            "Register it with register_type() or escape the marker as `%%`"
        )


class RegistryFrozenError(PlaceholderError):
    """Raised when a frozen registry receives a registration."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Cannot register '{name}': the registry is frozen and read-only"
        )
