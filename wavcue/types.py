from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from wavcue.errors import MalformedBextError

SECONDS_ROUNDING_CHOICES = ("half-even", "half-up", "truncate")
CLOCK_ROUNDING_CHOICES = ("truncate", "nearest")


@dataclass(frozen=True)
class RiffChunk:
    chunk_id: str
    size: int
    offset: int
    payload: bytes = field(repr=False)


@dataclass(frozen=True)
class FormatInfo:
    sample_rate: int
    format_tag: int = 1
    channels: int = 1
    byte_rate: int = 0
    block_align: int = 0
    bits_per_sample: int = 0


@dataclass(frozen=True)
class CuePoint:
    """One entry of a cue chunk.

    ``position`` is the playlist position and its meaning varies between
    producers; timing always comes from ``sample_offset``.
    """

    cue_id: int
    position: int
    data_chunk_id: str
    chunk_start: int
    block_start: int
    sample_offset: int

    @property
    def sample_position(self) -> int:
        return self.sample_offset


@dataclass(frozen=True)
class BroadcastExtension:
    origin_date: datetime.date
    origin_time: datetime.time
    time_reference: int
    description: str = ""
    originator: str = ""
    originator_reference: str = ""
    version: int = 0

    @property
    def origin(self) -> datetime.datetime:
        return datetime.datetime.combine(self.origin_date, self.origin_time)


@dataclass
class WaveMetadata:
    format: FormatInfo
    cues: List[CuePoint] = field(default_factory=list)
    bext: Optional[BroadcastExtension] = None
    bext_error: Optional[MalformedBextError] = None
    chunk_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CueRecord:
    index: int
    relative_seconds: Decimal
    label: str

    def to_csv_line(self) -> str:
        return f"{self.relative_seconds:.3f},{self.label}\n"


@dataclass(frozen=True)
class ConversionOptions:
    """Rounding policy and enrichment switches for a conversion.

    Args:
        seconds_rounding: how the exact offset is reduced to milliseconds,
            one of "half-even", "half-up" or "truncate".
        clock_rounding: how the wall-clock label drops its sub-second part,
            "truncate" (floor) or "nearest" (half-up).
        use_bext: when False the bext chunk is ignored and labels carry no time.
    """

    seconds_rounding: str = "half-even"
    clock_rounding: str = "truncate"
    use_bext: bool = True

    def __post_init__(self) -> None:
        if self.seconds_rounding not in SECONDS_ROUNDING_CHOICES:
            raise ValueError(f"unknown seconds_rounding: {self.seconds_rounding!r}")
        if self.clock_rounding not in CLOCK_ROUNDING_CHOICES:
            raise ValueError(f"unknown clock_rounding: {self.clock_rounding!r}")
