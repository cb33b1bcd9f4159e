from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, TextIO

from wavcue.chunks import read_wave_metadata
from wavcue.errors import CueExtractionError, WavFileNotFoundError
from wavcue.logging_utils import get_logger
from wavcue.markers import format_csv, reconcile
from wavcue.types import ConversionOptions

log = get_logger(__name__)


def convert_wav_bytes(data: bytes, options: Optional[ConversionOptions] = None) -> str:
    """Convert a whole WAV file held in memory to CSV marker lines.

    Raises a FormatError subclass on fatal problems; nothing is returned in
    that case, so callers never see partial output.
    """
    metadata = read_wave_metadata(data)
    records = reconcile(metadata.format, metadata.cues, metadata.bext, options)
    return format_csv(records)


def read_wav_file(input_path: str) -> bytes:
    if not os.path.isfile(input_path):
        raise WavFileNotFoundError(f"WAV file not found: {input_path}")
    with open(input_path, 'rb') as f:
        return f.read()


def convert_wav_file(input_path: str, output_path: Optional[str] = None,
                     options: Optional[ConversionOptions] = None) -> str:
    """Convert one WAV file; write the CSV to output_path when given and return it."""
    text = convert_wav_bytes(read_wav_file(input_path), options)
    if output_path is not None:
        with open(output_path, 'w', encoding='utf-8', newline='\n') as f:
            f.write(text)
        log.info("CSV written", extra={"input": input_path, "output": output_path, "lines": text.count("\n")})
    return text


def csv_path_for(input_path: str, output_dir: str) -> str:
    stem = os.path.splitext(os.path.basename(input_path))[0]
    return os.path.join(output_dir, stem + ".csv")


@dataclass
class BatchResult:
    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def convert_batch(
    paths: Sequence[str],
    output_dir: Optional[str] = None,
    options: Optional[ConversionOptions] = None,
    sink: Optional[TextIO] = None,
) -> BatchResult:
    """Convert each file independently; one failure does not stop the rest.

    With output_dir every input gets ``<stem>.csv`` there, otherwise the CSV
    text of each file is written to sink (stdout by default) in input order.
    """
    result = BatchResult()
    if output_dir is not None:
        os.makedirs(output_dir, exist_ok=True)
    out = sink if sink is not None else sys.stdout

    for path in paths:
        target = csv_path_for(path, output_dir) if output_dir is not None else None
        try:
            text = convert_wav_file(path, target, options)
        except (CueExtractionError, OSError) as e:
            log.error(f"failed to process {path!r}: {e}", extra={"path": path, "error_type": type(e).__name__})
            result.failed[path] = str(e)
            continue
        if target is None:
            out.write(text)
        result.succeeded.append(path)

    log.info("batch done", extra={"succeeded": len(result.succeeded), "failed": len(result.failed)})
    return result
