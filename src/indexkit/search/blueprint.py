"""Blueprints: per-type declarations of stored attributes and indexed fields.

A blueprint says which values of an object are stored (in declaration order,
one value slot each) and which are turned into search terms. Every
declaration carries an accessor that is either ``Direct`` (read an attribute
or call a no-argument method by name) or ``Computed`` (call a function with
the object).

Blueprints are registered at startup in a ``BlueprintRegistry`` and read-only
afterwards:

    registry = BlueprintRegistry()
    with registry.setup(Recipe) as blueprint:
        blueprint.attribute("title")
        blueprint.attribute("kind", lambda recipe: "zero" if recipe.id == 0 else "not zero")
        blueprint.index("body", weight=2)
        blueprint.language_method("lang_cd")
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, fields, is_dataclass
import inspect
import logging
import threading
from typing import Any, Union

from indexkit.errors import ConfigurationError, EvaluationError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Direct:
    """Read ``name`` from the object, calling it when it is a bound method."""

    name: str

    def __call__(self, obj: Any) -> Any:
        try:
            value = getattr(obj, self.name)
        except AttributeError as exc:
            msg = f"{type(obj).__name__} has no accessor '{self.name}'"
            raise ConfigurationError(msg) from exc
        if inspect.ismethod(value) or inspect.isbuiltin(value) or self._is_static(obj):
            return value()
        return value

    def _is_static(self, obj: Any) -> bool:
        return isinstance(inspect.getattr_static(type(obj), self.name, None), staticmethod)


@dataclass(frozen=True)
class Computed:
    """Call ``function(obj)``; failures surface as ``EvaluationError``."""

    function: Callable[[Any], Any]
    label: str = "<computed>"

    def __call__(self, obj: Any) -> Any:
        try:
            return self.function(obj)
        except Exception as exc:
            raise EvaluationError(self.label, f"{type(exc).__name__}: {exc}") from exc


Accessor = Union[Direct, Computed]


def _make_accessor(name: str, function: Callable[[Any], Any] | None) -> Accessor:
    if function is None:
        return Direct(name)
    if not callable(function):
        raise ConfigurationError(f"Accessor for '{name}' must be callable, got {type(function).__name__}")
    return Computed(function, label=name)


@dataclass(frozen=True)
class AttributeDeclaration:
    name: str
    accessor: Accessor


@dataclass(frozen=True)
class IndexDeclaration:
    name: str
    accessor: Accessor
    weight: int = 1

    @property
    def prefix(self) -> str:
        """Term prefix for field-qualified terms (``XTITLE`` for ``title``)."""
        return f"X{self.name.upper()}"


class Blueprint:
    """Schema for one object type."""

    def __init__(self, target: type) -> None:
        self.target = target
        self._attributes: dict[str, AttributeDeclaration] = {}
        self._indexed: dict[str, IndexDeclaration] = {}
        self.language_resolver: Accessor | None = None
        self.key_resolver: Accessor | None = None

    def __repr__(self) -> str:
        return (
            f"Blueprint({self.target.__name__}, attributes={list(self._attributes)}, "
            f"indexed={list(self._indexed)})"
        )

    @property
    def attributes(self) -> tuple[AttributeDeclaration, ...]:
        return tuple(self._attributes.values())

    @property
    def indexed_fields(self) -> tuple[IndexDeclaration, ...]:
        return tuple(self._indexed.values())

    def attribute(
        self,
        name: str,
        function: Callable[[Any], Any] | None = None,
        *,
        index: bool = True,
        weight: int = 1,
    ) -> Blueprint:
        """Declare a stored value slot; it is also indexed unless ``index=False``.

        Re-declaring a name keeps its original slot position.
        """

        accessor = _make_accessor(name, function)
        previous = self._attributes.get(name)
        self._attributes[name] = AttributeDeclaration(name, accessor)
        if index:
            self._indexed[name] = IndexDeclaration(name, accessor, _check_weight(name, weight))
        elif previous is not None and name in self._indexed and self._indexed[name].accessor is previous.accessor:
            # drop the index entry the earlier attribute() call created
            del self._indexed[name]
        return self

    def index(self, name: str, function: Callable[[Any], Any] | None = None, *, weight: int = 1) -> Blueprint:
        """Declare a field whose value is tokenized into terms."""

        self._indexed[name] = IndexDeclaration(name, _make_accessor(name, function), _check_weight(name, weight))
        return self

    def language_method(self, name_or_function: str | Callable[[Any], Any]) -> Blueprint:
        """Set the per-object language resolver."""

        self.language_resolver = _resolver(name_or_function, "language")
        return self

    def document_key(self, name_or_function: str | Callable[[Any], Any]) -> Blueprint:
        """Override how the opaque document id is derived from an object."""

        self.key_resolver = _resolver(name_or_function, "document_key")
        return self

    def resolve_attributes(self, obj: Any) -> list[tuple[str, Any]]:
        return [(declaration.name, declaration.accessor(obj)) for declaration in self._attributes.values()]

    def resolve_indexed_text(self, obj: Any) -> list[tuple[IndexDeclaration, Any]]:
        return [(declaration, declaration.accessor(obj)) for declaration in self._indexed.values()]

    def resolve_language(self, obj: Any) -> Any:
        if self.language_resolver is None:
            return None
        return self.language_resolver(obj)

    def resolve_document_key(self, obj: Any) -> str:
        if self.key_resolver is not None:
            return str(self.key_resolver(obj))
        key = getattr(obj, "document_key", None)
        if key is not None:
            return str(key() if inspect.ismethod(key) else key)
        try:
            identifier = obj.id
        except AttributeError as exc:
            msg = f"Cannot derive a document id for {type(obj).__name__}: declare document_key() or expose 'id'"
            raise ConfigurationError(msg) from exc
        return f"{type(obj).__name__}-{identifier}"

    def direct_accessor_names(self) -> list[str]:
        names = [d.name for d in self._attributes.values() if isinstance(d.accessor, Direct)]
        names.extend(d.accessor.name for d in self._indexed.values() if isinstance(d.accessor, Direct))
        for resolver in (self.language_resolver, self.key_resolver):
            if isinstance(resolver, Direct):
                names.append(resolver.name)
        return list(dict.fromkeys(names))

    def validate(self) -> None:
        """Check every direct accessor against the target type.

        Only types with a closed shape (dataclasses, pydantic models, fully
        slotted classes) are checked here. Instances of other classes may gain
        attributes in ``__init__``, so ``Direct`` reports missing names when a
        document is built.

        Raises:
            ConfigurationError: If a closed type does not declare one of the names.
        """

        if not has_closed_shape(self.target):
            logger.debug("%s has an open shape, accessors are checked per object", self.target.__name__)
            return
        declared = declared_names(self.target)
        missing = [name for name in self.direct_accessor_names() if name not in declared]
        if missing:
            msg = f"{self.target.__name__} does not declare accessor(s): {', '.join(missing)}"
            raise ConfigurationError(msg)


def _check_weight(name: str, weight: int) -> int:
    if not isinstance(weight, int) or isinstance(weight, bool) or weight < 1:
        raise ConfigurationError(f"Weight for '{name}' must be a positive integer, got {weight!r}")
    return weight


def _resolver(name_or_function: str | Callable[[Any], Any], label: str) -> Accessor:
    if isinstance(name_or_function, str):
        return Direct(name_or_function)
    return _make_accessor(label, name_or_function)


def has_closed_shape(target: type) -> bool:
    """Return True when every instance attribute of ``target`` is known from the class."""

    if is_dataclass(target) or isinstance(getattr(target, "model_fields", None), dict):
        return True
    for klass in inspect.getmro(target)[:-1]:
        slots = klass.__dict__.get("__slots__")
        if slots is None:
            return False
        if "__dict__" in ((slots,) if isinstance(slots, str) else slots):
            return False
    return True


def declared_names(target: type) -> set[str]:
    """Collect every attribute name a type statically declares.

    Covers class attributes, methods and properties, annotations, dataclass
    fields, ``__slots__`` and pydantic ``model_fields`` across the MRO.
    """

    names: set[str] = set(dir(target))
    for klass in inspect.getmro(target):
        names.update(getattr(klass, "__annotations__", {}))
        slots = klass.__dict__.get("__slots__", ())
        names.update((slots,) if isinstance(slots, str) else slots)
    if is_dataclass(target):
        names.update(f.name for f in fields(target))
    model_fields = getattr(target, "model_fields", None)
    if isinstance(model_fields, dict):
        names.update(model_fields)
    return names


class BlueprintRegistry:
    """Owns the latest blueprint per type; written at startup, read while indexing."""

    def __init__(self) -> None:
        self._blueprints: dict[type, Blueprint] = {}
        self._lock = threading.Lock()

    def __contains__(self, target: type) -> bool:
        return target in self._blueprints

    def __len__(self) -> int:
        return len(self._blueprints)

    def register(self, blueprint: Blueprint) -> Blueprint:
        """Validate and register ``blueprint``, replacing any earlier one for its type."""

        blueprint.validate()
        with self._lock:
            replaced = self._blueprints.get(blueprint.target)
            self._blueprints[blueprint.target] = blueprint
        if replaced is not None:
            logger.debug("Replaced blueprint for %s", blueprint.target.__name__)
        return blueprint

    @contextmanager
    def setup(self, target: type) -> Iterator[Blueprint]:
        """Yield a fresh blueprint for ``target`` and register it on clean exit."""

        blueprint = Blueprint(target)
        yield blueprint
        self.register(blueprint)

    def blueprint_for(self, target: type) -> Blueprint:
        """Return the blueprint for ``target`` or the nearest registered base class.

        Raises:
            ConfigurationError: If no blueprint covers the type.
        """

        blueprint = self._blueprints.get(target)
        if blueprint is not None:
            return blueprint
        for base in inspect.getmro(target)[1:]:
            blueprint = self._blueprints.get(base)
            if blueprint is not None:
                return blueprint
        raise ConfigurationError(f"No blueprint registered for {target.__name__}")
