"""Facet normalizers.

Each function turns one fragment of the aggregate response into typed
entities.  None of them raise: a missing or malformed fragment yields an
empty result, and malformed entries are dropped one by one.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pymist.ingestion.normalize import as_mapping, safe_str
from pymist.models.client import ClientSession
from pymist.models.protocol import ProtocolState
from pymist.models.push import PushRecord
from pymist.models.stream import StreamConfig, StreamStat

_logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_PUSH_ROW_FIELDS: tuple[str, ...] = ("id", "stream", "target")


def unwrap_data_envelope(fragment: Any, key_field: str | None = None) -> dict[str, Any]:
    """Strip the optional ``{"data": ...}`` wrapper from a fragment.

    Parameters
    ----------
    fragment
        Raw fragment from the aggregate response.
    key_field
        For the tabular form (``{"fields": [...], "data": [[...], ...]}``),
        the field whose value keys each row.  Rows without it are keyed by
        their index.

    Returns
    -------
    dict
        ``{}`` for ``None``, non-mappings and ``{"data": None}``; the inner
        dict for ``{"data": {...}}``; zipped rows for the tabular form; the
        fragment itself when it has no ``data`` key.
    """
    if not isinstance(fragment, Mapping):
        if fragment is not None:
            _logger.debug("Ignoring non-mapping fragment of type %s", type(fragment).__name__)
        return {}
    if "data" not in fragment:
        return as_mapping(fragment)

    data = fragment["data"]
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return as_mapping(data)
    if isinstance(data, list):
        fields = fragment.get("fields")
        if not isinstance(fields, list):
            _logger.debug("Tabular fragment without a field list; ignoring %d rows", len(data))
            return {}
        return _zip_rows(fields, data, key_field)

    _logger.debug("Ignoring data wrapper of type %s", type(data).__name__)
    return {}


def _zip_rows(fields: list[Any], rows: list[Any], key_field: str | None) -> dict[str, Any]:
    names = [str(field) for field in fields]
    result: dict[str, Any] = {}
    for index, row in enumerate(rows):
        if not isinstance(row, list):
            continue
        entry = dict(zip(names, row, strict=False))
        key = _key_text(entry.get(key_field)) if key_field else None
        result[key if key is not None else str(index)] = entry
    return result


def _key_text(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(int(value))
    return safe_str(value)


def _validate(model: type[ModelT], payload: dict[str, Any], *, facet: str, key: str) -> ModelT | None:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        _logger.debug("Dropping malformed %s entry %r: %s", facet, key, exc.errors(include_url=False))
        return None


def normalize_streams(fragment: Any) -> dict[str, StreamConfig]:
    """Map configured stream name to :class:`StreamConfig`."""
    result: dict[str, StreamConfig] = {}
    for name, entry in as_mapping(fragment).items():
        if not isinstance(entry, Mapping):
            _logger.debug("Dropping stream %r with non-mapping config", name)
            continue
        raw = dict(entry)
        model = _validate(StreamConfig, {**raw, "name": name, "raw": raw}, facet="stream", key=name)
        if model is not None:
            result[name] = model
    return result


def normalize_active_streams(fragment: Any) -> frozenset[str]:
    """Return the set of online stream names.

    The server reports either a list of names or a mapping keyed by name.
    """
    if isinstance(fragment, Mapping):
        return frozenset(str(name) for name in fragment)
    if isinstance(fragment, list):
        return frozenset(name for name in fragment if isinstance(name, str) and name)
    if fragment is not None:
        _logger.debug("Ignoring active streams of type %s", type(fragment).__name__)
    return frozenset()


def normalize_stream_stats(fragment: Any) -> dict[str, StreamStat]:
    """Map stream name to live :class:`StreamStat`."""
    result: dict[str, StreamStat] = {}
    for name, entry in unwrap_data_envelope(fragment, key_field="name").items():
        if not isinstance(entry, Mapping):
            _logger.debug("Dropping stats for %r with non-mapping value", name)
            continue
        raw = dict(entry)
        model = _validate(StreamStat, {**raw, "name": name, "raw": raw}, facet="stream stats", key=name)
        if model is not None:
            result[name] = model
    return result


def _push_entry(value: Any) -> dict[str, Any] | None:
    """Return a push entry as a dict, expanding ``[id, stream, target, ...]`` rows."""
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, list) and len(value) >= len(_PUSH_ROW_FIELDS):
        entry = dict(zip(_PUSH_ROW_FIELDS, value, strict=False))
        # Trailing stats object, when present, carries the counters.
        if isinstance(value[-1], Mapping):
            entry.update({k: v for k, v in value[-1].items() if k not in _PUSH_ROW_FIELDS})
        return entry
    return None


def normalize_push_list(fragment: Any) -> dict[str, PushRecord]:
    """Map push id to :class:`PushRecord`.

    Accepts a mapping of id to record, or a list of rows/records that carry
    their own id.
    """
    keyed: list[tuple[str | None, Any]]
    if isinstance(fragment, Mapping):
        keyed = [(str(key), value) for key, value in fragment.items()]
    elif isinstance(fragment, list):
        keyed = [(None, value) for value in fragment]
    else:
        if fragment is not None:
            _logger.debug("Ignoring push list of type %s", type(fragment).__name__)
        return {}

    result: dict[str, PushRecord] = {}
    for key, value in keyed:
        entry = _push_entry(value)
        if entry is None:
            _logger.debug("Dropping malformed push entry %r", key if key is not None else value)
            continue
        push_id = key if key is not None else _key_text(entry.get("id"))
        if push_id is None:
            _logger.debug("Dropping push entry without an id")
            continue
        raw = value if isinstance(value, Mapping) else {"row": list(value)}
        model = _validate(PushRecord, {**entry, "push_id": push_id, "raw": dict(raw)}, facet="push", key=push_id)
        if model is not None:
            result[push_id] = model
    return result


def normalize_clients(fragment: Any) -> tuple[dict[str, ClientSession], dict[str, dict[str, ClientSession]]]:
    """Return the flat client map and the clients-by-stream index.

    Sessions with no string ``stream`` appear in the flat map only.
    """
    flat: dict[str, ClientSession] = {}
    by_stream: dict[str, dict[str, ClientSession]] = {}
    for session_id, entry in unwrap_data_envelope(fragment, key_field="sessId").items():
        if not isinstance(entry, Mapping):
            _logger.debug("Dropping client %r with non-mapping value", session_id)
            continue
        raw = dict(entry)
        model = _validate(ClientSession, {**raw, "session_id": session_id, "raw": raw}, facet="client", key=session_id)
        if model is None:
            continue
        flat[session_id] = model
        stream = raw.get("stream")
        if isinstance(stream, str) and stream:
            by_stream.setdefault(stream, {})[session_id] = model
    return flat, by_stream


def normalize_protocols(raw: Any) -> dict[str, ProtocolState]:
    """Map connector name to :class:`ProtocolState`.

    Reads ``raw["config"]["protocols"]``; the first entry for a connector wins.
    """
    protocols = as_mapping(as_mapping(raw).get("config")).get("protocols")
    if protocols is None:
        return {}
    if not isinstance(protocols, list):
        _logger.debug("Ignoring protocols of type %s", type(protocols).__name__)
        return {}

    result: dict[str, ProtocolState] = {}
    for entry in protocols:
        if not isinstance(entry, Mapping):
            continue
        connector = entry.get("connector")
        if not isinstance(connector, str) or not connector:
            _logger.debug("Dropping protocol entry without a connector")
            continue
        if connector in result:
            continue
        model = _validate(ProtocolState, {**entry, "raw": dict(entry)}, facet="protocol", key=connector)
        if model is not None:
            result[connector] = model
    return result
