"""
Binary record layout for the keyed stores.

Each record is encoded as::

    [format version: 1 byte]
    [fixed-width fields, big-endian, in declaration order]
    [for each text field: 2-byte length + UTF-8 bytes]

The leading version byte lets a future layout coexist with records
written by this one.  ``max_size`` is the slot size the owning store
declares; encoding anything larger raises ``RecordTooLargeError``.
"""

import struct
from typing import Any, Dict, Generic, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel

from .errors import RecordTooLargeError

FORMAT_VERSION = 1

U64_MAX = 2**64 - 1

_VERSION = struct.Struct(">B")
_TEXT_LENGTH = struct.Struct(">H")

M = TypeVar("M", bound=BaseModel)


class RecordCodec(Generic[M]):
    """Encode/decode one pydantic model to and from bytes.

    Parameters
    ----------
    model : type
        The pydantic model class being stored.
    fixed_fields : sequence of (name, struct format) pairs
        Fixed-width fields, e.g. ``("id", "Q")``.
    text_fields : sequence of str
        Variable-length UTF-8 text fields, written after the fixed part.
    max_size : int
        Largest encoded size a store slot accepts.
    """

    def __init__(
        self,
        model: Type[M],
        fixed_fields: Sequence[Tuple[str, str]],
        text_fields: Sequence[str],
        max_size: int,
    ) -> None:
        self.model = model
        self.fixed_names = [name for name, _ in fixed_fields]
        self.fixed = struct.Struct(">" + "".join(fmt for _, fmt in fixed_fields))
        self.text_fields = list(text_fields)
        self.max_size = max_size

    def encode(self, record: M) -> bytes:
        values = record.model_dump()
        parts = [
            _VERSION.pack(FORMAT_VERSION),
            self.fixed.pack(*(values[name] for name in self.fixed_names)),
        ]
        for name in self.text_fields:
            raw = values[name].encode("utf-8")
            parts.append(_TEXT_LENGTH.pack(len(raw)))
            parts.append(raw)
        data = b"".join(parts)
        if len(data) > self.max_size:
            raise RecordTooLargeError(
                f"{self.model.__name__} encodes to {len(data)} bytes, "
                f"slot size is {self.max_size}"
            )
        return data

    def decode(self, data: bytes) -> M:
        (version,) = _VERSION.unpack_from(data, 0)
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported {self.model.__name__} format version {version}")
        offset = _VERSION.size
        values: Dict[str, Any] = dict(
            zip(self.fixed_names, self.fixed.unpack_from(data, offset))
        )
        offset += self.fixed.size
        for name in self.text_fields:
            (length,) = _TEXT_LENGTH.unpack_from(data, offset)
            offset += _TEXT_LENGTH.size
            values[name] = data[offset:offset + length].decode("utf-8")
            offset += length
        return self.model(**values)
