"""Reading RIFF/WAVE files into a sample format and a block of raw sample bytes."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

__all__ = ["WaveFormatError", "WaveFormat", "WaveData", "parse_wave", "load_wave"]

_RIFF = b"RIFF"
_WAVE = b"WAVE"
_FMT = b"fmt "
_DATA = b"data"
_FORMAT_LAYOUT = struct.Struct("<HHIIHH")
_EXTRA_SIZE = struct.Struct("<H")
_FIRST_CHUNK_OFFSET = 12
_MIN_RIFF_SIZE = 16


class WaveFormatError(ValueError):
    """Raised when bytes are not a usable RIFF/WAVE file."""


@dataclass(frozen=True)
class WaveFormat:
    """The fields of a wave file's format chunk."""

    format_tag: int
    channels: int
    samples_per_sec: int
    avg_bytes_per_sec: int
    block_align: int
    bits_per_sample: int
    cb_size: int = 0


@dataclass(frozen=True)
class WaveData:
    """A parsed wave file: how to play the samples, and the samples themselves."""

    format: WaveFormat
    samples: bytes

    @property
    def byte_count(self) -> int:
        return len(self.samples)


def _chunks(data: bytes, limit: int) -> Iterator[Tuple[bytes, int, int]]:
    """Yield (id, body offset, body size) for each chunk after the WAVE tag."""
    offset = _FIRST_CHUNK_OFFSET
    while offset < limit:
        if offset + 8 > len(data):
            raise WaveFormatError(f"truncated chunk header at offset {offset}")
        chunk_id = data[offset : offset + 4]
        (size,) = struct.unpack_from("<I", data, offset + 4)
        yield chunk_id, offset + 8, size
        # Skip the 8-byte header and the body, padded to an even length
        offset += (size + 9) & ~1


def _find_chunk(data: bytes, limit: int, wanted: bytes) -> Optional[Tuple[int, int]]:
    for chunk_id, start, size in _chunks(data, limit):
        if chunk_id == wanted:
            return start, size
    return None


def _parse_format(body: bytes) -> WaveFormat:
    if len(body) < _FORMAT_LAYOUT.size:
        raise WaveFormatError(f"format chunk is too short ({len(body)} bytes)")
    fields = _FORMAT_LAYOUT.unpack_from(body)
    cb_size = 0
    if len(body) >= _FORMAT_LAYOUT.size + _EXTRA_SIZE.size:
        (cb_size,) = _EXTRA_SIZE.unpack_from(body, _FORMAT_LAYOUT.size)
    return WaveFormat(*fields, cb_size=cb_size)


def parse_wave(data: bytes) -> WaveData:
    """Parse the bytes of a RIFF/WAVE file."""
    data = bytes(data)
    if len(data) < 8 or data[:4] != _RIFF:
        raise WaveFormatError("not a RIFF file")
    (riff_size,) = struct.unpack_from("<I", data, 4)
    if riff_size <= _MIN_RIFF_SIZE:
        raise WaveFormatError(f"RIFF size {riff_size} is too small")
    if len(data) < riff_size:
        raise WaveFormatError(f"file holds {len(data)} bytes but claims {riff_size}")
    if data[8:12] != _WAVE:
        raise WaveFormatError("RIFF file is not a WAVE file")

    found = _find_chunk(data, riff_size, _FMT)
    if found is None:
        raise WaveFormatError("no format chunk")
    start, size = found
    wave_format = _parse_format(data[start : start + size])

    found = _find_chunk(data, riff_size, _DATA)
    if found is None:
        raise WaveFormatError("no data chunk")
    start, size = found
    if start + size > len(data):
        raise WaveFormatError(f"data chunk claims {size} bytes but the file ends first")
    return WaveData(wave_format, data[start : start + size])


def load_wave(path: Union[str, os.PathLike]) -> WaveData:
    """Read and parse the wave file at ``path``."""
    with open(path, "rb") as stream:
        return parse_wave(stream.read())