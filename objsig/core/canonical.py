# objsig/core/canonical.py
"""
Canonical serialization of plain data values.

A value is first normalized into a tree of None/bool/int/float/str/list/dict
with mapping keys in UTF-8 byte order and integral floats folded into ints.
That tree is then encoded with the json module (or msgpack) without any
insignificant whitespace, so the resulting bytes depend only on the logical
value.
"""
from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable

import msgpack

from .errors import CyclicStructureError, EncodingError, UnsupportedTypeError

# Optional NumPy support
try:
    import numpy as np
except ImportError:
    np = None

logger = logging.getLogger(__name__)

Serializer = Callable[[Any], Union[bytes, str]]

ROOT = "$"


@runtime_checkable
class SupportsToValue(Protocol):
    """Objects that can describe themselves as a plain data value."""

    def to_value(self) -> Any:
        ...


def _is_numpy(obj) -> bool:
    if np is None:
        return False
    return isinstance(obj, (np.generic, np.ndarray))


def _key_bytes(key: str, path: str) -> bytes:
    try:
        return key.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(f"Cannot encode mapping key at {path}: {e}") from e


def _normalize_float(value: float, path: str) -> Union[int, float]:
    if math.isnan(value) or math.isinf(value):
        raise EncodingError(f"Cannot canonicalize {path}: non-finite float {value!r}")
    if value.is_integer():
        return int(value)
    return float(value)


def _normalize(value: Any, path: str, active: set) -> Any:
    if value is None:
        return None
    if isinstance(value, bool):
        return bool(value)
    # plain conversions, so subclass __str__/__int__ overrides don't leak in
    if isinstance(value, int):
        return int.__int__(value)
    if isinstance(value, float):
        return _normalize_float(float.__float__(value), path)
    if isinstance(value, str):
        return str.__str__(value)

    marker = id(value)
    if marker in active:
        raise CyclicStructureError(path)

    if isinstance(value, SupportsToValue) and callable(value.to_value):
        active.add(marker)
        try:
            return _normalize(value.to_value(), path, active)
        finally:
            active.discard(marker)

    if _is_numpy(value):
        # np.generic -> python scalar, np.ndarray -> nested lists
        plain = value.item() if isinstance(value, np.generic) else value.tolist()
        return _normalize(plain, path, active)

    if isinstance(value, Mapping):
        active.add(marker)
        try:
            items = []
            for key, item in value.items():
                if not isinstance(key, str):
                    raise UnsupportedTypeError(
                        f"{path}[{key!r}]", type(key).__name__, "mapping keys must be str"
                    )
                key = str.__str__(key)
                child = f"{path}.{key}"
                items.append((_key_bytes(key, child), key, _normalize(item, child, active)))
        finally:
            active.discard(marker)
        items.sort(key=lambda entry: entry[0])
        return {key: item for _, key, item in items}

    if isinstance(value, (list, tuple)):
        active.add(marker)
        try:
            return [_normalize(item, f"{path}[{i}]", active) for i, item in enumerate(value)]
        finally:
            active.discard(marker)

    raise UnsupportedTypeError(path, type(value).__name__)


def to_canonical_value(value: Any) -> Any:
    """
    Normalize ``value`` into plain data with a single canonical shape.

    Supported: dict (str keys), list, tuple, str, int, float, bool, None,
    numpy scalars and arrays, and any object with a ``to_value()`` method.
    """
    try:
        return _normalize(value, ROOT, set())
    except RecursionError as e:
        raise EncodingError("Value is nested too deeply to canonicalize") from e


def canonical_json(value: Any) -> str:
    """Return the canonical JSON text of ``value``."""
    normalized = to_canonical_value(value)
    try:
        return json.dumps(
            normalized,
            ensure_ascii=False,
            separators=(",", ":"),
            allow_nan=False,
        )
    except (ValueError, RecursionError) as e:
        raise EncodingError(f"JSON encoding failed: {e}") from e


def canonical_msgpack(value: Any) -> bytes:
    """Return the canonical msgpack encoding of ``value``.

    Can be passed as ``serializer=`` to produce binary-encoded signatures.
    """
    normalized = to_canonical_value(value)
    try:
        return msgpack.packb(normalized, use_bin_type=True, use_single_float=False)
    except (ValueError, OverflowError, UnicodeEncodeError, RecursionError) as e:
        # ints outside the 64-bit range have no msgpack encoding
        raise EncodingError(f"msgpack encoding failed: {e}") from e


def _utf8(text: str) -> bytes:
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(f"Text is not encodable as UTF-8: {e}") from e


def canonicalize(value: Any, serializer: Optional[Serializer] = None) -> bytes:
    """
    Return the canonical byte stream for ``value``.

    When ``serializer`` is given its output is used verbatim; str output is
    encoded as UTF-8.
    """
    if serializer is None:
        data = _utf8(canonical_json(value))
    else:
        out = serializer(value)
        if isinstance(out, str):
            data = _utf8(out)
        elif isinstance(out, (bytes, bytearray, memoryview)):
            data = bytes(out)
        else:
            raise EncodingError(
                f"Serializer must return bytes or str, got {type(out).__name__}"
            )

    logger.debug("canonicalized value to %d bytes", len(data))
    return data
