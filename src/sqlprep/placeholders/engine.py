"""Placeholder substitution engine.

Walks the tokens of a pattern from left to right, threading an explicit
argument cursor through them, and assembles the output string. The
number of arguments consumed must equal the number supplied.

Example:
    >>> substitute("SELECT * FROM users WHERE id = ? AND active = ?", 5, True)
    'SELECT * FROM users WHERE id = 5 AND active = 1'
"""

from typing import Any, Callable, List, Optional, Sequence

from sqlprep.placeholders.base import (
    NonNullableNull,
    PlaceholderCountMismatch,
    PlaceholderError,
    UnknownPlaceholderType,
)
from sqlprep.placeholders.escaping import DEFAULT_QUOTE_CHAR
from sqlprep.placeholders.formatters import (
    BUILTIN_TYPES,
    NULL_KEYWORD,
    FormatContext,
    ValueKind,
    classify,
    format_scalar,
)
from sqlprep.placeholders.modifiers import ModifierChain, parse_modifiers
from sqlprep.placeholders.registry import TypeRegistry, get_default_registry
from sqlprep.placeholders.tokenizer import Token, TokenKind, tokenize

ErrorHandler = Callable[[PlaceholderError], Optional[str]]


class _Cursor:
    """Position in the argument list for a single substitution pass."""

    def __init__(self, pattern: str, args: Sequence[Any]):
        self.pattern = pattern
        self.args = args
        self.index = 0

    def take(self) -> Any:
        value = self.args[self.index]
        self.index += 1
        return value

    def take_handler(self) -> Optional[ErrorHandler]:
        """Skip over a callable sitting right after a typed argument."""
        if self.index < len(self.args) and callable(self.args[self.index]):
            handler = self.args[self.index]
            self.index += 1
            return handler
        return None


def _count_arguments(tokens: List[Token], args: Sequence[Any]) -> int:
    """Number of arguments a pass over the tokens takes, handlers included.

    Mirrors the cursor moves of the substitution pass without formatting
    anything, so arity is settled before any value is looked at.
    """
    index = 0
    for token in tokens:
        index += token.consumes
        if (
            token.kind == TokenKind.TYPED
            and index < len(args)
            and callable(args[index])
        ):
            index += 1
    return index


class Substituter:
    """Renders patterns against positional arguments.

    Args:
        registry: Registry of custom types and modifiers. Defaults to the
            process-wide registry.
        quote_char: Character wrapped around quoted text values.
        utf8mb4: Keep 4-byte UTF-8 characters in typed text placeholders
            (``%string``, ``%varchar``, ``%s`` ...) instead of replacing them,
            as if each carried ``:utf8mb4``. Text given to ``?`` and ``@``
            is never stripped.

    Example:
        >>> Substituter(quote_char="'").substitute("name = ?", "Bob")
        "name = 'Bob'"
    """

    def __init__(
        self,
        registry: Optional[TypeRegistry] = None,
        quote_char: str = DEFAULT_QUOTE_CHAR,
        utf8mb4: bool = False,
    ):
        self.registry = registry if registry is not None else get_default_registry()
        self.quote_char = quote_char
        self.utf8mb4 = utf8mb4

    def substitute(
        self, pattern: str, *args: Any, on_error: Optional[ErrorHandler] = None
    ) -> str:
        """Replace every placeholder in a pattern with its formatted argument.

        A single list argument is unwrapped so its elements become the
        arguments. A callable directly after the argument of a typed
        placeholder is taken as that placeholder's error handler.

        Args:
            pattern: Pattern containing ``?``, ``@``, ``%type`` and range
                placeholders.
            *args: Positional arguments, one per placeholder.
            on_error: Handler called with any PlaceholderError raised while
                formatting a single placeholder. A string return replaces the
                placeholder; None re-raises the error.

        Returns:
            The rendered string.

        Raises:
            PlaceholderCountMismatch: If the arguments do not match the
                placeholders in number.
            PlaceholderError: Any other formatting failure not resolved by
                an error handler.
        """
        arguments: Sequence[Any] = args
        if len(args) == 1 and isinstance(args[0], list):
            arguments = args[0]

        tokens = list(tokenize(pattern))
        consumed = _count_arguments(tokens, arguments)
        if consumed != len(arguments):
            raise PlaceholderCountMismatch(pattern, consumed, len(arguments))

        cursor = _Cursor(pattern, arguments)
        output: List[str] = []

        for token in tokens:
            literal = token.literal
            if literal is not None:
                output.append(literal)
            elif token.kind == TokenKind.RANGE:
                output.append(self._expand_range(token, cursor, on_error))
            else:
                output.append(self._resolve(token, cursor, on_error))

        return "".join(output)

    def _resolve(
        self, token: Token, cursor: _Cursor, on_error: Optional[ErrorHandler]
    ) -> str:
        index = cursor.index
        value = cursor.take()
        handler = on_error
        if token.kind == TokenKind.TYPED:
            handler = cursor.take_handler() or on_error

        context = FormatContext(
            pattern=cursor.pattern,
            placeholder=token.text,
            index=index,
            name=token.name or "",
            quote_char=self.quote_char,
            utf8mb4=self.utf8mb4,
        )
        try:
            if token.kind == TokenKind.TYPED:
                return self._format_typed(token, value, context)
            return format_scalar(value, token.kind == TokenKind.QUOTED, context)
        except PlaceholderError as e:
            if handler is None:
                raise
            replacement = handler(e)
            if replacement is None:
                raise
            return replacement

    def _format_typed(self, token: Token, value: Any, context: FormatContext) -> str:
        modifiers = parse_modifiers(
            token.chain,
            token.arguments,
            placeholder=token.text,
            pattern=context.pattern,
            position=token.position,
        )

        if value is None:
            if modifiers.nullable:
                return NULL_KEYWORD
            raise NonNullableNull(context.index, token.text)

        result = self._run_modifier_hooks(value, modifiers)
        if result is not None:
            return result

        formatter = self.registry.get_type(token.name)
        if formatter is not None:
            result = formatter(value, modifiers)
            if isinstance(result, str):
                return result

        builtin = BUILTIN_TYPES.get(token.name)
        if builtin is None:
            raise UnknownPlaceholderType(token.name, context.pattern)
        return builtin(value, modifiers, context)

    def _run_modifier_hooks(self, value: Any, modifiers: ModifierChain) -> Optional[str]:
        for flag in sorted(modifiers.flags):
            hook = self.registry.get_modifier(flag)
            if hook is None:
                continue
            result = hook(value, modifiers)
            if isinstance(result, str):
                return result
            if result is True:
                return str(value)
        return None

    def _expand_range(
        self, token: Token, cursor: _Cursor, on_error: Optional[ErrorHandler]
    ) -> str:
        # Take every ? bound before validating, so a handled error leaves
        # the cursor past the whole range
        parts = []
        for part in token.bounds:
            if part == "?":
                parts.append((cursor.index, cursor.take()))
            else:
                parts.append((None, int(part)))

        bounds = []
        for index, value in parts:
            if index is not None and (
                classify(value) != ValueKind.NUMBER or not isinstance(value, int)
            ):
                error = FormatContext(
                    pattern=cursor.pattern, placeholder=token.text, index=index
                ).type_error(value, "integer")
                replacement = on_error(error) if on_error is not None else None
                if replacement is None:
                    raise error
                return replacement
            bounds.append(value)

        start, end = bounds
        step = 1 if end >= start else -1
        return ", ".join(str(n) for n in range(start, end + step, step))


def substitute(
    pattern: str,
    *args: Any,
    on_error: Optional[ErrorHandler] = None,
    registry: Optional[TypeRegistry] = None,
) -> str:
    """Render a pattern with the default quote character.

    Shortcut for ``Substituter(registry).substitute(pattern, *args)``.

    Example:
        >>> substitute("WHERE id = ?", 5)
        'WHERE id = 5'
    """
    return Substituter(registry=registry).substitute(pattern, *args, on_error=on_error)
