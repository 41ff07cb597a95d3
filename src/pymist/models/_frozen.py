"""Read-only containers for snapshot contents.

Snapshots are shared by every reader of the store, so their facets and
each entity's ``raw`` payload are handed out as read-only views.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any, TypeVar

from pydantic import AfterValidator, PlainSerializer, SerializerFunctionWrapHandler, WrapSerializer

K = TypeVar("K")
V = TypeVar("V")


def freeze(value: Any) -> Any:
    """Return a deep read-only copy of a JSON-like *value*.

    Mappings become :class:`types.MappingProxyType` over a fresh dict and
    lists become tuples.
    """
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`: plain dicts and lists, safe to serialize."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


def empty_mapping() -> Mapping[Any, Any]:
    return MappingProxyType({})


def _read_only(value: Mapping[K, V]) -> Mapping[K, V]:
    return MappingProxyType(dict(value))


def _dump_mapping(value: Mapping[Any, Any], handler: SerializerFunctionWrapHandler) -> Any:
    return handler(dict(value))


ReadOnlyMap = Annotated[Mapping[K, V], AfterValidator(_read_only), WrapSerializer(_dump_mapping)]
"""Mapping field stored as a read-only view (values are already frozen)."""

FrozenRaw = Annotated[Mapping[str, Any], AfterValidator(freeze), PlainSerializer(thaw)]
"""Wire payload stored as a deep read-only copy."""
