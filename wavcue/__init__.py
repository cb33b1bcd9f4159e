"""Core package for reading cue markers out of WAV files.

This package provides typed, testable modules that the CLI script imports.
The parsing core works on in-memory bytes only; file handling lives in
``wavcue.convert``.
"""
