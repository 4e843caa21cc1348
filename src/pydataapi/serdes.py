"""Extended JSON codec for Data API payloads.

Python values that JSON has no native form for travel as single-key
wrapper objects:

=================  ==========================================
``datetime``       ``{"$date": <epoch milliseconds>}``
``uuid.UUID``      ``{"$uuid": "<canonical string>"}``
``ObjectId``       ``{"$objectId": "<24 hex chars>"}``
``bytes``          ``{"$binary": "<base64>"}``
``DataAPIVector``  ``{"$binary": "<base64 float32>"}`` or a number list
=================  ==========================================

A serializer is an ordinary object built with its options and handed to
whoever needs it; there is no process-wide instance.
"""

from __future__ import annotations

import base64
import enum
import json
import logging
import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any

from pydataapi import _constants as kw
from pydataapi._errors import (
    ERR_MSG_SERIALIZATION_FAILED,
    InvalidVectorError,
    SerializationError,
)
from pydataapi.types import DataAPIVector, ObjectId

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


@dataclass(frozen=True)
class SerdesOptions:
    """Serializer settings."""

    encode_vectors_as_binary: bool = True
    """Send vectors as packed ``$binary`` instead of number arrays."""

    exclude_none: bool = True
    """Drop mapping entries whose value is ``None``."""


def datetime_to_millis(value: datetime | date) -> int:
    """Epoch milliseconds; naive datetimes and plain dates are read as UTC."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // _ONE_MS


def millis_to_datetime(millis: int | float) -> datetime:
    return _EPOCH + timedelta(milliseconds=millis)


class DataAPISerializer:
    """Encodes Python values to Data API JSON and back."""

    def __init__(self, options: SerdesOptions | None = None) -> None:
        self._options = options or SerdesOptions()
        logger.debug("serializer created with %s", self._options)

    @property
    def options(self) -> SerdesOptions:
        return self._options

    # ---- Encoding ----

    def encode(self, value: Any) -> Any:
        """Convert ``value`` into plain JSON-compatible structures."""
        if value is None or isinstance(value, (str, bool, int, float)):
            return value
        if isinstance(value, enum.Enum):
            return self.encode(value.value)
        if isinstance(value, Decimal):
            return self._encode_decimal(value)
        if isinstance(value, (datetime, date)):
            return {kw.DATE: datetime_to_millis(value)}
        if isinstance(value, uuid.UUID):
            return {kw.UUID: str(value)}
        if isinstance(value, ObjectId):
            return {kw.OBJECT_ID: value.hex}
        if isinstance(value, DataAPIVector):
            if self._options.encode_vectors_as_binary:
                return {kw.BINARY: value.to_base64()}
            return value.to_list()
        if isinstance(value, (bytes, bytearray)):
            return {kw.BINARY: base64.b64encode(bytes(value)).decode("ascii")}
        if hasattr(value, "to_dict"):
            return self._encode_mapping(value.to_dict())
        if isinstance(value, Mapping):
            return self._encode_mapping(value)
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.encode(v) for v in value]
        raise SerializationError(
            ERR_MSG_SERIALIZATION_FAILED,
            f"cannot encode value of type {type(value).__name__}",
        )

    @staticmethod
    def _encode_decimal(value: Decimal) -> int | Decimal:
        """Integral decimals become ints; others stay exact for ``marshall``."""
        if not value.is_finite():
            raise SerializationError(
                ERR_MSG_SERIALIZATION_FAILED,
                f"cannot encode non-finite decimal {value}",
            )
        if value == value.to_integral_value():
            return int(value)
        return value

    def _encode_mapping(self, value: Mapping[Any, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for k, v in value.items():
            if v is None and self._options.exclude_none:
                continue
            result[str(k)] = self.encode(v)
        return result

    # ---- Decoding ----

    def decode(self, value: Any, key: str | None = None) -> Any:
        """Turn extended JSON wrappers back into Python values."""
        if isinstance(value, dict):
            if len(value) == 1:
                wrapped = self._decode_wrapper(value, key)
                if wrapped is not value:
                    return wrapped
            return {k: self.decode(v, k) for k, v in value.items()}
        if isinstance(value, list):
            if key == kw.VECTOR and all(
                isinstance(v, (int, float)) and not isinstance(v, bool) for v in value
            ):
                return DataAPIVector(value)
            return [self.decode(v) for v in value]
        return value

    def _decode_wrapper(self, value: dict[str, Any], key: str | None) -> Any:
        ((name, inner),) = value.items()
        try:
            if name == kw.DATE and isinstance(inner, (int, float)):
                return millis_to_datetime(inner)
            if name == kw.UUID and isinstance(inner, str):
                return uuid.UUID(inner)
            if name == kw.OBJECT_ID and isinstance(inner, str):
                return ObjectId(inner)
            if name == kw.BINARY and isinstance(inner, str):
                if key == kw.VECTOR:
                    return DataAPIVector.from_base64(inner)
                return base64.b64decode(inner)
        except (ValueError, InvalidVectorError) as e:
            raise SerializationError(
                ERR_MSG_SERIALIZATION_FAILED,
                f"cannot decode {name} value {inner!r}",
                wrapped=e,
            ) from e
        return value

    # ---- Text ----

    def marshall(self, value: Any) -> str:
        """Serialize ``value`` to a compact JSON string."""
        if isinstance(value, str):
            return value
        try:
            return _dumps(self.encode(value))
        except ValueError as e:
            raise SerializationError(
                ERR_MSG_SERIALIZATION_FAILED,
                f"cannot marshall object {value!r}",
                wrapped=e,
            ) from e

    def unmarshall(self, text: str | bytes) -> Any:
        """Parse JSON text and decode extended JSON wrappers."""
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise SerializationError(
                ERR_MSG_SERIALIZATION_FAILED,
                f"cannot unmarshall object {text!r}",
                wrapped=e,
            ) from e
        return self.decode(data)


def _dumps(value: Any) -> str:
    """Compact ``json.dumps`` that writes ``Decimal`` values digit for digit."""
    decimals: list[str] = []
    marker = f"decimal-{uuid.uuid4().hex}-"

    def default(obj: Any) -> str:
        if isinstance(obj, Decimal):
            decimals.append(str(obj))
            return f"{marker}{len(decimals) - 1}"
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    text = json.dumps(value, separators=(",", ":"), allow_nan=False, default=default)
    if not decimals:
        return text
    # placeholders were emitted as JSON strings; put the bare number back
    return re.sub(
        rf'"{re.escape(marker)}(\d+)"', lambda m: decimals[int(m.group(1))], text
    )
