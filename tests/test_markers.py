import datetime
from decimal import Decimal

import pytest

from wavcue.errors import InvalidSampleRateError
from wavcue.markers import format_csv, mark_label, reconcile, seconds_from_samples, wall_clock_time
from wavcue.types import BroadcastExtension, ConversionOptions, CuePoint, CueRecord, FormatInfo


def cue(sample_offset, cue_id=1):
    return CuePoint(cue_id=cue_id, position=0, data_chunk_id="data", chunk_start=0, block_start=0,
                    sample_offset=sample_offset)


def bext(origin="12:23:00", time_reference=0, date=datetime.date(2023, 5, 14)):
    return BroadcastExtension(
        origin_date=date,
        origin_time=datetime.time.fromisoformat(origin),
        time_reference=time_reference,
    )


class TestSeconds:
    def test_exact_quotient(self):
        assert seconds_from_samples(122290, 44100) == Decimal("2.773")

    def test_sample_zero(self):
        assert f"{seconds_from_samples(0, 48000):.3f}" == "0.000"

    @pytest.mark.parametrize("position, rounding, expected", [
        (3000, "half-even", "0.062"),
        (9000, "half-even", "0.188"),
        (3000, "half-up", "0.063"),
        (9000, "half-up", "0.188"),
        (3000, "truncate", "0.062"),
        (9000, "truncate", "0.187"),
    ])
    def test_half_millisecond_boundaries(self, position, rounding, expected):
        # 3000/48000 = 0.0625 and 9000/48000 = 0.1875 exactly
        assert str(seconds_from_samples(position, 48000, rounding)) == expected

    def test_largest_position(self):
        assert str(seconds_from_samples(0xFFFFFFFF, 1)) == "4294967295.000"

    def test_zero_rate(self):
        with pytest.raises(InvalidSampleRateError):
            seconds_from_samples(10, 0)


class TestWallClock:
    def test_origin_plus_offset_truncates(self):
        assert wall_clock_time(bext("12:23:00"), 122290, 44100) == datetime.time(12, 23, 2)

    def test_nearest_rounding(self):
        assert wall_clock_time(bext("12:23:00"), 122290, 44100, "nearest") == datetime.time(12, 23, 3)

    def test_midnight_origin_at_sample_zero(self):
        assert wall_clock_time(bext("00:00:00"), 0, 48000) == datetime.time(0, 0, 0)

    def test_time_reference_anchors_origin(self):
        assert wall_clock_time(bext("10:00:00", time_reference=48000 * 60), 48000 * 90, 48000) == \
            datetime.time(10, 0, 30)

    def test_samples_before_reference_go_back(self):
        # -0.5 s floors to the previous second
        assert wall_clock_time(bext("10:00:00", time_reference=48000), 24000, 48000) == datetime.time(9, 59, 59)

    def test_wraps_past_midnight(self):
        assert wall_clock_time(bext("23:59:30"), 48000 * 45, 48000) == datetime.time(0, 0, 15)

    def test_huge_time_reference(self):
        ref = 2 ** 63
        clock = wall_clock_time(bext("06:00:00", time_reference=ref), 0, 48000)
        assert isinstance(clock, datetime.time)


class TestReconcile:
    def test_one_record_per_cue_in_file_order(self):
        cues = [cue(48000 * 5, 3), cue(48000, 1), cue(48000, 2)]
        records = reconcile(FormatInfo(sample_rate=48000), cues)
        assert [r.label for r in records] == ["Mark 1", "Mark 2", "Mark 3"]
        assert [str(r.relative_seconds) for r in records] == ["5.000", "1.000", "1.000"]

    def test_clock_suffix_with_bext(self):
        records = reconcile(FormatInfo(sample_rate=44100), [cue(122290)], bext("12:23:00"))
        assert records == [CueRecord(index=1, relative_seconds=Decimal("2.773"), label="Mark 1 12:23:02")]

    def test_bext_can_be_ignored(self):
        options = ConversionOptions(use_bext=False)
        records = reconcile(FormatInfo(sample_rate=44100), [cue(122290)], bext(), options)
        assert records[0].label == "Mark 1"

    def test_zero_rate_fails_even_without_cues(self):
        with pytest.raises(InvalidSampleRateError):
            reconcile(FormatInfo(sample_rate=0), [])

    def test_no_cues(self):
        assert reconcile(FormatInfo(sample_rate=44100), [], bext()) == []


class TestFormat:
    def test_lines(self):
        records = [
            CueRecord(index=1, relative_seconds=Decimal("2.773"), label="Mark 1 12:23:42"),
            CueRecord(index=2, relative_seconds=Decimal("63.045"), label="Mark 2 12:24:43"),
        ]
        assert format_csv(records) == "2.773,Mark 1 12:23:42\n63.045,Mark 2 12:24:43\n"

    def test_empty(self):
        assert format_csv([]) == ""

    def test_no_thousands_separator(self):
        record = CueRecord(index=1, relative_seconds=Decimal("12345.600"), label="Mark 1")
        assert record.to_csv_line() == "12345.600,Mark 1\n"

    def test_mark_label(self):
        assert mark_label(4) == "Mark 4"
        assert mark_label(4, datetime.time(1, 2, 3)) == "Mark 4 01:02:03"


def test_options_reject_unknown_rounding():
    with pytest.raises(ValueError):
        ConversionOptions(seconds_rounding="banker")
    with pytest.raises(ValueError):
        ConversionOptions(clock_rounding="ceil")
