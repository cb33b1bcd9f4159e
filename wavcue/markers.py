from __future__ import annotations

import datetime
import math
from decimal import ROUND_DOWN, ROUND_HALF_EVEN, ROUND_HALF_UP, Context, Decimal
from fractions import Fraction
from typing import Iterable, List, Optional, Sequence

from wavcue.errors import InvalidSampleRateError
from wavcue.logging_utils import get_logger
from wavcue.types import BroadcastExtension, ConversionOptions, CuePoint, CueRecord, FormatInfo

log = get_logger(__name__)

MILLISECOND = Decimal("0.001")
SECONDS_PER_DAY = 86400

_ANCHOR_DATE = datetime.date(2000, 1, 1)

_DECIMAL_ROUNDING = {
    "half-even": ROUND_HALF_EVEN,
    "half-up": ROUND_HALF_UP,
    "truncate": ROUND_DOWN,
}

# u32 / u32 needs at most 10 integer digits; 40 keeps the quotient exact
# well past the millisecond place before quantizing.
_EXACT = Context(prec=40)


def _check_rate(sample_rate: int) -> None:
    if sample_rate == 0:
        raise InvalidSampleRateError("sample rate is zero")


def seconds_from_samples(sample_position: int, sample_rate: int, rounding: str = "half-even") -> Decimal:
    """Offset of a sample in seconds, reduced to milliseconds.

    The quotient is computed in decimal so boundary values such as 0.0625
    round by the named rule rather than by binary float artefacts.
    """
    _check_rate(sample_rate)
    exact = _EXACT.divide(Decimal(sample_position), Decimal(sample_rate))
    return exact.quantize(MILLISECOND, rounding=_DECIMAL_ROUNDING[rounding], context=_EXACT)


def _whole_seconds(offset: Fraction, rounding: str) -> int:
    if rounding == "nearest":
        return math.floor(offset + Fraction(1, 2))
    return math.floor(offset)


def wall_clock_time(
    bext: BroadcastExtension,
    sample_position: int,
    sample_rate: int,
    rounding: str = "truncate",
) -> datetime.time:
    """Time of day of a sample, anchored on the bext origin and time reference.

    The origin marks ``time_reference``; samples before it give negative
    offsets. Only the time of day is returned, so the offset is reduced to
    within one day and added on a fixed date, which keeps huge 64-bit time
    references from overflowing the calendar.
    """
    _check_rate(sample_rate)
    offset = Fraction(sample_position - bext.time_reference, sample_rate)
    seconds = _whole_seconds(offset, rounding) % SECONDS_PER_DAY
    moment = datetime.datetime.combine(_ANCHOR_DATE, bext.origin_time) + datetime.timedelta(seconds=seconds)
    return moment.time()


def mark_label(index: int, clock: Optional[datetime.time] = None) -> str:
    label = f"Mark {index}"
    if clock is not None:
        label += " " + clock.strftime("%H:%M:%S")
    return label


def reconcile(
    format_info: FormatInfo,
    cues: Sequence[CuePoint],
    bext: Optional[BroadcastExtension] = None,
    options: Optional[ConversionOptions] = None,
) -> List[CueRecord]:
    """Turn decoded cue points into output records, one per cue, in file order."""
    options = options or ConversionOptions()
    _check_rate(format_info.sample_rate)
    if not options.use_bext:
        bext = None

    records: List[CueRecord] = []
    for index, cue in enumerate(cues, start=1):
        seconds = seconds_from_samples(cue.sample_position, format_info.sample_rate, options.seconds_rounding)
        clock = None
        if bext is not None:
            clock = wall_clock_time(bext, cue.sample_position, format_info.sample_rate, options.clock_rounding)
        records.append(CueRecord(index=index, relative_seconds=seconds, label=mark_label(index, clock)))

    log.debug("cues reconciled", extra={"count": len(records), "clock": bext is not None})
    return records


def format_csv(records: Iterable[CueRecord]) -> str:
    """Render records as newline-terminated CSV lines without a header."""
    return "".join(record.to_csv_line() for record in records)
