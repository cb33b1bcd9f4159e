from __future__ import annotations

import struct
from typing import Iterator, List, Tuple

from wavcue.errors import NotRiffError, NotWaveError, TruncatedChunkError
from wavcue.logging_utils import get_logger
from wavcue.types import RiffChunk

log = get_logger(__name__)

RIFF_HEADER_SIZE = 12
CHUNK_HEADER_SIZE = 8

_CHUNK_HEADER = struct.Struct("<4sI")


def _tag(raw: bytes) -> str:
    return raw.decode("latin-1")


def check_header(data: bytes) -> int:
    """Validate the RIFF/WAVE header and return the declared RIFF size."""
    if len(data) < 4 or data[0:4] != b"RIFF":
        raise NotRiffError("buffer does not start with a RIFF header")
    if len(data) < RIFF_HEADER_SIZE or data[8:12] != b"WAVE":
        form = _tag(data[8:12]) if len(data) >= RIFF_HEADER_SIZE else ""
        raise NotWaveError(f"RIFF form type is {form!r}, expected 'WAVE'")
    (riff_size,) = struct.unpack_from("<I", data, 4)
    return riff_size


def iter_chunks(data: bytes) -> Iterator[RiffChunk]:
    """Yield the top-level chunks of a RIFF/WAVE buffer in file order.

    Odd-sized chunks are followed by a pad byte which is skipped and never
    part of the payload. A declared size reaching past the end of the buffer
    raises TruncatedChunkError instead of being clamped; a missing pad byte
    after the last chunk is accepted.
    """
    riff_size = check_header(data)
    if riff_size + CHUNK_HEADER_SIZE != len(data):
        log.debug("riff size differs from buffer length", extra={
            "declared": riff_size + CHUNK_HEADER_SIZE, "actual": len(data),
        })

    end = len(data)
    offset = RIFF_HEADER_SIZE
    while offset < end:
        if end - offset < CHUNK_HEADER_SIZE:
            raise TruncatedChunkError(
                f"incomplete chunk header at offset {offset} ({end - offset} bytes left)"
            )
        raw_id, size = _CHUNK_HEADER.unpack_from(data, offset)
        start = offset + CHUNK_HEADER_SIZE
        if start + size > end:
            raise TruncatedChunkError(
                f"chunk {_tag(raw_id)!r} at offset {offset} declares {size} bytes, "
                f"only {end - start} available"
            )
        yield RiffChunk(chunk_id=_tag(raw_id), size=size, offset=offset, payload=bytes(data[start:start + size]))
        offset = start + size + (size & 1)


def list_chunks(data: bytes) -> List[Tuple[str, int, int]]:
    """Return (chunk_id, offset, size) for every chunk, for diagnostics."""
    return [(chunk.chunk_id, chunk.offset, chunk.size) for chunk in iter_chunks(data)]
