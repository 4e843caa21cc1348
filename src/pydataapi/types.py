"""Value types with a dedicated Data API wire representation."""

from __future__ import annotations

import base64
import binascii
import os
import re
import struct
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pydataapi._errors import InvalidArgumentError, InvalidVectorError

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


@dataclass(frozen=True)
class ObjectId:
    """A 12-byte MongoDB-style identifier, held as 24 lowercase hex chars."""

    hex: str

    def __post_init__(self) -> None:
        if not isinstance(self.hex, str) or not _OBJECT_ID_RE.match(self.hex):
            raise InvalidArgumentError(
                "invalid ObjectId",
                f"ObjectId must be 24 hexadecimal characters, got {self.hex!r}",
            )
        object.__setattr__(self, "hex", self.hex.lower())

    @classmethod
    def generate(cls) -> ObjectId:
        """Timestamp-prefixed identifier: 4 bytes of seconds then 8 random bytes."""
        raw = struct.pack(">I", int(time.time()) & 0xFFFFFFFF) + os.urandom(8)
        return cls(raw.hex())

    @property
    def timestamp(self) -> int:
        """Creation time in epoch seconds."""
        return struct.unpack(">I", bytes.fromhex(self.hex[:8]))[0]

    def __str__(self) -> str:
        return self.hex


@dataclass(frozen=True, init=False)
class DataAPIVector:
    """A float32 embedding.

    On the wire a vector is either a JSON array of numbers or a
    ``{"$binary": ...}`` wrapper around the base64 of its big-endian
    float32 packing.
    """

    embeddings: tuple[float, ...]

    def __init__(self, embeddings: Iterable[float] = ()) -> None:
        object.__setattr__(self, "embeddings", tuple(float(x) for x in embeddings))

    def __len__(self) -> int:
        return len(self.embeddings)

    def __iter__(self):
        return iter(self.embeddings)

    @property
    def dimension(self) -> int:
        return len(self.embeddings)

    def to_bytes(self) -> bytes:
        """Pack as consecutive big-endian IEEE-754 float32 values."""
        return struct.pack(f">{len(self.embeddings)}f", *self.embeddings)

    @classmethod
    def from_bytes(cls, data: bytes) -> DataAPIVector:
        if len(data) % 4 != 0:
            raise InvalidVectorError(
                "invalid packed vector",
                f"Vector length ({len(data)}) not a multiple of 4 bytes",
            )
        return cls(struct.unpack(f">{len(data) // 4}f", data))

    def to_base64(self) -> str:
        return base64.b64encode(self.to_bytes()).decode("ascii")

    @classmethod
    def from_base64(cls, text: str) -> DataAPIVector:
        try:
            data = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidVectorError(
                "invalid packed vector",
                f"cannot decode base64 vector {text!r}",
                wrapped=e,
            ) from e
        return cls.from_bytes(data)

    def to_list(self) -> list[float]:
        return list(self.embeddings)


def as_vector(value: DataAPIVector | Sequence[float]) -> DataAPIVector:
    """Wrap a plain float sequence, pass vectors through."""
    if isinstance(value, DataAPIVector):
        return value
    return DataAPIVector(value)
