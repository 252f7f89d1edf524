"""Registry of user-defined placeholder types and modifiers.

Formatters registered here are consulted by the substitution engine
before any built-in type handling, so a plugin can fully override the
behaviour of ``%string`` or add a brand new ``%password`` type.

Third-party packages can also contribute formatters through the
``sqlprep.types`` and ``sqlprep.modifiers`` entry point groups; these
are discovered the first time the default registry is used.
"""

import threading
from importlib.metadata import entry_points
from typing import Any, Callable, Dict, List, Optional, Union

from rich.console import Console

from sqlprep.placeholders.base import RegistryFrozenError
from sqlprep.placeholders.modifiers import ModifierChain

console = Console(stderr=True)

TYPES_ENTRY_POINT = "sqlprep.types"
MODIFIERS_ENTRY_POINT = "sqlprep.modifiers"

TypeFormatter = Callable[[Any, ModifierChain], Optional[str]]
ModifierHook = Callable[[Any, ModifierChain], Union[str, bool, None]]


class TypeRegistry:
    """Name-keyed store of type formatters and modifier hooks.

    Registration is last-write-wins and there is no unregistration.
    Writes are serialized by a lock and replace the underlying mapping
    wholesale, so concurrent lookups always see a complete table. Call
    freeze() once start-up registration is finished to make the registry
    read-only.

    Example:
        >>> registry = TypeRegistry()
        >>> registry.register_type("password", lambda v, m: '"***"')
        >>> registry.get_type("password")("secret", ModifierChain())
        '"***"'
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._types: Dict[str, TypeFormatter] = {}
        self._modifiers: Dict[str, ModifierHook] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        """Whether the registry rejects further registrations."""
        return self._frozen

    def freeze(self) -> None:
        """Make the registry read-only."""
        with self._lock:
            self._frozen = True

    def register_type(self, name: str, formatter: TypeFormatter) -> None:
        """Register a formatter for a placeholder type.

        Args:
            name: Type name as written after ``%`` in a pattern.
            formatter: Callable taking (value, modifiers) and returning the
                replacement text, or None to fall back to built-in handling.

        Raises:
            ValueError: If the formatter is not callable or the name is empty.
            RegistryFrozenError: If the registry has been frozen.
        """
        self._check(name, formatter)
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(name)
            self._types = {**self._types, name: formatter}

    def register_modifier(self, name: str, hook: ModifierHook) -> None:
        """Register a hook that runs when a modifier flag is present.

        Args:
            name: Modifier flag name, e.g. ``"password"`` for ``:password``.
            hook: Callable taking (value, modifiers). A string return is the
                final replacement, True emits the value as plain text, and
                False or None falls through to type handling.

        Raises:
            ValueError: If the hook is not callable or the name is empty.
            RegistryFrozenError: If the registry has been frozen.
        """
        self._check(name, hook)
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(name)
            self._modifiers = {**self._modifiers, name: hook}

    def get_type(self, name: str) -> Optional[TypeFormatter]:
        return self._types.get(name)

    def get_modifier(self, name: str) -> Optional[ModifierHook]:
        return self._modifiers.get(name)

    def list_types(self) -> List[str]:
        """Return the sorted names of registered types."""
        return sorted(self._types)

    def list_modifiers(self) -> List[str]:
        """Return the sorted names of registered modifiers."""
        return sorted(self._modifiers)

    def copy(self) -> "TypeRegistry":
        """Return an unfrozen registry holding the same entries."""
        clone = TypeRegistry()
        clone._types = dict(self._types)
        clone._modifiers = dict(self._modifiers)
        return clone

    def clear(self) -> None:
        """Remove every entry and unfreeze the registry.

        This is primarily useful for testing.
        """
        with self._lock:
            self._types = {}
            self._modifiers = {}
            self._frozen = False

    @staticmethod
    def _check(name: str, func: Callable) -> None:
        if not name or not isinstance(name, str):
            raise ValueError("Registered name must be a non-empty string")
        if not callable(func):
            raise ValueError(f"{func!r} registered as '{name}' is not callable")


_default_registry: Optional[TypeRegistry] = None
_discovery_done: bool = False


def _discover_plugins(registry: TypeRegistry) -> None:
    """Load formatters from the sqlprep entry point groups.

    A plugin that fails to load or register is reported on stderr and skipped,
    so a missing optional dependency does not break every pattern.
    """
    global _discovery_done

    if _discovery_done:
        return

    for group, register in (
        (TYPES_ENTRY_POINT, registry.register_type),
        (MODIFIERS_ENTRY_POINT, registry.register_modifier),
    ):
        for ep in entry_points(group=group):
            try:
                register(ep.name, ep.load())
            except Exception as e:
                console.print(
                    f"[yellow]Warning:[/yellow] Skipping {group} plugin '{ep.name}': {e}"
                )

    _discovery_done = True


def get_default_registry() -> TypeRegistry:
    """Return the process-wide registry, discovering plugins on first use."""
    global _default_registry

    if _default_registry is None:
        _default_registry = TypeRegistry()
    _discover_plugins(_default_registry)
    return _default_registry


def register_type(name: str, formatter: TypeFormatter) -> None:
    """Register a type formatter on the process-wide registry."""
    get_default_registry().register_type(name, formatter)


def register_modifier(name: str, hook: ModifierHook) -> None:
    """Register a modifier hook on the process-wide registry."""
    get_default_registry().register_modifier(name, hook)


def list_types() -> List[str]:
    """List type names registered on the process-wide registry."""
    return get_default_registry().list_types()


def clear_registry() -> None:
    """Clear the process-wide registry.

    Plugins are rediscovered on next use. This is primarily useful for
    testing.
    """
    global _discovery_done
    if _default_registry is not None:
        _default_registry.clear()
    _discovery_done = False
