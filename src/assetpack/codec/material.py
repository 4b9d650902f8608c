"""Material library binary codec.

Layout per record (no count header; records run to the end of the buffer)::

    name\\0 diffuse_tex\\0 specular_tex\\0 height_tex\\0   UTF-8, may be empty
    <7f  diffuse rgb, specular rgb, specular power      little endian

Decoding never reads past the buffer: any truncation or out-of-range value
raises :class:`CorruptDataError`.
"""

from __future__ import annotations

import math
import struct
from typing import Iterable, List, Tuple

from ..errors import (
    corrupt,
    E_BAD_ENCODING,
    E_INVALID_PARAM,
    E_TRUNCATED,
    E_UNTERMINATED_STRING,
)
from ..models import MaterialRecord

__all__ = [
    "SUFFIX_MATERIAL_LIB",
    "encode_material",
    "encode_material_lib",
    "decode_material_lib",
]

SUFFIX_MATERIAL_LIB = "/material_lib"

_PARAMS = struct.Struct("<7f")
_STRING_FIELDS = ("name", "diffuse_texture", "specular_texture", "height_texture")


def _cstring(value: str) -> bytes:
    raw = value.encode("utf-8")
    if b"\x00" in raw:
        raise ValueError(f"string {value!r} contains a NUL byte")
    return raw + b"\x00"


def encode_material(record: MaterialRecord) -> bytes:
    out = bytearray()
    for attr in _STRING_FIELDS:
        out += _cstring(getattr(record, attr))
    out += _PARAMS.pack(
        *record.diffuse_color, *record.specular_color, record.specular_power
    )
    return bytes(out)


def encode_material_lib(records: Iterable[MaterialRecord]) -> bytes:
    return b"".join(encode_material(r) for r in records)


def _read_cstring(data: bytes, offset: int, record_index: int) -> Tuple[str, int]:
    end = data.find(b"\x00", offset)
    if end < 0:
        raise corrupt(
            E_UNTERMINATED_STRING,
            "Corrupt material lib: unterminated string",
            {"record": record_index, "offset": offset},
        )
    try:
        text = data[offset:end].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise corrupt(
            E_BAD_ENCODING,
            "Corrupt material lib: string is not valid UTF-8",
            {"record": record_index, "offset": offset},
        ) from exc
    return text, end + 1


def _in_unit_range(values: Iterable[float]) -> bool:
    return all(0.0 <= v <= 1.0 for v in values)


def decode_material_lib(data: bytes | memoryview) -> List[MaterialRecord]:
    buf = bytes(data)
    records: List[MaterialRecord] = []
    offset = 0
    while offset < len(buf):
        index = len(records)
        strings = []
        for _ in _STRING_FIELDS:
            text, offset = _read_cstring(buf, offset, index)
            strings.append(text)
        if offset + _PARAMS.size > len(buf):
            raise corrupt(
                E_TRUNCATED,
                "Corrupt material lib: truncated parameter block",
                {"record": index, "offset": offset, "size": len(buf)},
            )
        params = _PARAMS.unpack_from(buf, offset)
        offset += _PARAMS.size
        diffuse, specular, power = params[0:3], params[3:6], params[6]
        if (
            not _in_unit_range(diffuse)
            or not _in_unit_range(specular)
            or math.isnan(power)
            or power < 0.0
        ):
            raise corrupt(
                E_INVALID_PARAM,
                "Corrupt material lib: invalid parameter data",
                {"record": index, "name": strings[0]},
            )
        name, tex_diffuse, tex_specular, tex_height = strings
        records.append(
            MaterialRecord(
                name=name,
                diffuse_texture=tex_diffuse,
                specular_texture=tex_specular,
                height_texture=tex_height,
                diffuse_color=diffuse,  # type: ignore[arg-type]
                specular_color=specular,  # type: ignore[arg-type]
                specular_power=power,
            )
        )
    return records
