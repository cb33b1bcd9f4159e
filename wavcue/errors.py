from __future__ import annotations


class CueExtractionError(Exception):
    """Base error for the wav-cue extractor."""


class FormatError(CueExtractionError):
    """Raised when a WAV buffer cannot be decoded."""


class NotRiffError(FormatError):
    """Raised when the buffer does not start with a RIFF header."""


class NotWaveError(FormatError):
    """Raised when the RIFF form type is not WAVE."""


class TruncatedChunkError(FormatError):
    """Raised when a chunk header or payload runs past the end of the buffer."""


class MalformedFmtError(FormatError):
    """Raised when the fmt chunk is too short to hold the format block."""


class MalformedCueError(FormatError):
    """Raised when the cue chunk holds fewer records than it declares."""


class MalformedBextError(FormatError):
    """Raised when the bext chunk is short or its date/time fields are invalid.

    Callers treat this as recoverable: cue data is still emitted, without
    time-of-day labels.
    """


class InvalidSampleRateError(FormatError):
    """Raised when the sample rate is zero."""


class MissingFmtError(FormatError):
    """Raised when no fmt chunk is present."""


class WavFileNotFoundError(CueExtractionError, FileNotFoundError):
    """Raised when an input WAV file does not exist."""
