from __future__ import annotations

import datetime
import re
import struct
from typing import Callable, Dict, List, Optional

from wavcue.errors import MalformedBextError, MalformedCueError, MalformedFmtError, MissingFmtError
from wavcue.logging_utils import get_logger
from wavcue.riff import iter_chunks
from wavcue.types import BroadcastExtension, CuePoint, FormatInfo, WaveMetadata

log = get_logger(__name__)

FMT_TAG = "fmt "
CUE_TAG = "cue "
BEXT_TAG = "bext"

# fmt: format tag u16, channels u16, sample rate u32, byte rate u32,
# block align u16, bits per sample u16. Extension bytes after 16 are ignored.
_FMT = struct.Struct("<HHIIHH")

# cue: u32 count, then per point: id u32, position u32, data chunk id 4s,
# chunk start u32, block start u32, sample offset u32.
_CUE_COUNT = struct.Struct("<I")
_CUE_POINT = struct.Struct("<II4sIII")

# bext (EBU Tech 3285), offsets in bytes:
#   0 description[256], 256 originator[32], 288 originator reference[32],
#   320 origination date[10], 330 origination time[8],
#   338 time reference low u32, 342 time reference high u32, 346 version u16.
# UMID, loudness fields and reserved space pad the fixed part to 602 bytes.
BEXT_MIN_SIZE = 602
_BEXT = struct.Struct("<256s32s32s10s8sIIH")

_SEP = r"[-_:. ]"
_DATE_RE = re.compile(rf"^(\d{{4}}){_SEP}(\d{{2}}){_SEP}(\d{{2}})$", re.ASCII)
_TIME_RE = re.compile(rf"^(\d{{2}}){_SEP}(\d{{2}}){_SEP}(\d{{2}})$", re.ASCII)


def decode_fmt(payload: bytes) -> FormatInfo:
    if len(payload) < _FMT.size:
        raise MalformedFmtError(f"fmt chunk has {len(payload)} bytes, need at least {_FMT.size}")
    format_tag, channels, sample_rate, byte_rate, block_align, bits = _FMT.unpack_from(payload, 0)
    return FormatInfo(
        sample_rate=sample_rate,
        format_tag=format_tag,
        channels=channels,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits,
    )


def decode_cue(payload: bytes) -> List[CuePoint]:
    """Decode a cue chunk into cue points, keeping file order."""
    if len(payload) < _CUE_COUNT.size:
        raise MalformedCueError("cue chunk too short for point count")
    (count,) = _CUE_COUNT.unpack_from(payload, 0)
    needed = _CUE_COUNT.size + count * _CUE_POINT.size
    if len(payload) < needed:
        available = (len(payload) - _CUE_COUNT.size) // _CUE_POINT.size
        raise MalformedCueError(f"cue chunk declares {count} points, only {available} present")
    if len(payload) > needed:
        log.debug("cue chunk has trailing bytes", extra={"extra_bytes": len(payload) - needed})

    points: List[CuePoint] = []
    for i in range(count):
        cue_id, position, data_chunk_id, chunk_start, block_start, sample_offset = _CUE_POINT.unpack_from(
            payload, _CUE_COUNT.size + i * _CUE_POINT.size
        )
        points.append(CuePoint(
            cue_id=cue_id,
            position=position,
            data_chunk_id=data_chunk_id.decode("latin-1"),
            chunk_start=chunk_start,
            block_start=block_start,
            sample_offset=sample_offset,
        ))
    return points


def _ascii_field(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("ascii", errors="replace").strip()


def _parse_origin(raw_date: bytes, raw_time: bytes) -> tuple[datetime.date, datetime.time]:
    try:
        date_text = raw_date.decode("ascii")
        time_text = raw_time.decode("ascii")
    except UnicodeDecodeError as e:
        raise MalformedBextError(f"origination date/time is not ASCII: {e}") from e

    date_match = _DATE_RE.match(date_text)
    if date_match is None:
        raise MalformedBextError(f"origination date {date_text!r} is not YYYY-MM-DD")
    time_match = _TIME_RE.match(time_text)
    if time_match is None:
        raise MalformedBextError(f"origination time {time_text!r} is not HH:MM:SS")

    try:
        origin_date = datetime.date(*(int(g) for g in date_match.groups()))
        origin_time = datetime.time(*(int(g) for g in time_match.groups()))
    except ValueError as e:
        raise MalformedBextError(f"origination {date_text} {time_text} out of range: {e}") from e
    return origin_date, origin_time


def decode_bext(payload: bytes) -> BroadcastExtension:
    """Decode the fixed part of a Broadcast Wave Extension chunk.

    The time reference is stored as two little-endian 32-bit words, low word
    first. Coding history after the fixed part is not read.
    """
    if len(payload) < BEXT_MIN_SIZE:
        raise MalformedBextError(f"bext chunk has {len(payload)} bytes, need at least {BEXT_MIN_SIZE}")
    (description, originator, originator_ref, raw_date, raw_time,
     ref_low, ref_high, version) = _BEXT.unpack_from(payload, 0)
    origin_date, origin_time = _parse_origin(raw_date, raw_time)
    return BroadcastExtension(
        origin_date=origin_date,
        origin_time=origin_time,
        time_reference=(ref_high << 32) | ref_low,
        description=_ascii_field(description),
        originator=_ascii_field(originator),
        originator_reference=_ascii_field(originator_ref),
        version=version,
    )


CHUNK_DECODERS: Dict[str, Callable[[bytes], object]] = {
    FMT_TAG: decode_fmt,
    CUE_TAG: decode_cue,
    BEXT_TAG: decode_bext,
}


def read_wave_metadata(data: bytes) -> WaveMetadata:
    """Walk a WAV buffer once and decode the fmt, cue and bext chunks.

    The first chunk of each kind wins. A bad bext chunk is logged and kept in
    ``bext_error``; every other decode error propagates.
    """
    decoded: Dict[str, object] = {}
    bext_error: Optional[MalformedBextError] = None
    chunk_ids: List[str] = []

    for chunk in iter_chunks(data):
        chunk_ids.append(chunk.chunk_id)
        decoder = CHUNK_DECODERS.get(chunk.chunk_id)
        if decoder is None:
            log.debug("skip chunk", extra={"chunk": chunk.chunk_id, "size": chunk.size})
            continue
        if chunk.chunk_id in decoded or (chunk.chunk_id == BEXT_TAG and bext_error is not None):
            log.warning("duplicate chunk ignored", extra={"chunk": chunk.chunk_id, "offset": chunk.offset})
            continue
        try:
            decoded[chunk.chunk_id] = decoder(chunk.payload)
        except MalformedBextError as e:
            log.warning(f"bext chunk unusable, labels will omit time of day: {e}")
            bext_error = e

    format_info = decoded.get(FMT_TAG)
    if format_info is None:
        raise MissingFmtError("no fmt chunk found")

    return WaveMetadata(
        format=format_info,  # type: ignore[arg-type]
        cues=decoded.get(CUE_TAG, []),  # type: ignore[arg-type]
        bext=decoded.get(BEXT_TAG),  # type: ignore[arg-type]
        bext_error=bext_error,
        chunk_ids=chunk_ids,
    )
