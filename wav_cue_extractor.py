from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from wavcue.convert import convert_batch, read_wav_file
from wavcue.errors import CueExtractionError
from wavcue.logging_utils import get_logger, setup_logging
from wavcue.riff import list_chunks
from wavcue.types import CLOCK_ROUNDING_CHOICES, SECONDS_ROUNDING_CHOICES, ConversionOptions

log = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments for marker extraction."""
    parser = argparse.ArgumentParser(description="Extract cue markers from WAV files as CSV labels")
    parser.add_argument("files", nargs="+", help="Input WAV file(s)")
    parser.add_argument("--output_dir", type=str, default=None,
                        help="Write <name>.csv per input here instead of printing to stdout")
    parser.add_argument("--seconds_rounding", choices=SECONDS_ROUNDING_CHOICES, default="half-even",
                        help="Rounding of marker offsets to milliseconds (default: half-even)")
    parser.add_argument("--clock_rounding", choices=CLOCK_ROUNDING_CHOICES, default="truncate",
                        help="Rounding of time-of-day labels to whole seconds (default: truncate)")
    parser.add_argument("--no_clock", action="store_true", help="Ignore bext data; labels carry no time of day")
    parser.add_argument("--list_chunks", action="store_true", help="Print the RIFF chunk layout instead of CSV")
    parser.add_argument("--log_level", type=str, default=None, help="Log level (e.g., INFO, DEBUG)")
    return parser.parse_args(argv)


def _print_chunk_layout(paths: List[str]) -> bool:
    ok = True
    for path in paths:
        try:
            chunks = list_chunks(read_wav_file(path))
        except (CueExtractionError, OSError) as e:
            log.error(f"failed to walk {path!r}: {e}")
            ok = False
            continue
        print(f"{path}:")
        for chunk_id, offset, size in chunks:
            print(f"  {chunk_id!r} @ {offset}, size={size}")
    return ok


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point.

    Examples:
      python3 wav_cue_extractor.py ZOOM0001.WAV > ZOOM0001.csv
      python3 wav_cue_extractor.py recordings/*.WAV --output_dir labels
    """
    args = parse_args(argv)
    setup_logging(args.log_level)

    if args.list_chunks:
        return 0 if _print_chunk_layout(args.files) else 1

    options = ConversionOptions(
        seconds_rounding=args.seconds_rounding,
        clock_rounding=args.clock_rounding,
        use_bext=not args.no_clock,
    )
    result = convert_batch(args.files, output_dir=args.output_dir, options=options)
    if not result.ok:
        log.error("some files failed", extra={"failed": sorted(result.failed)})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
