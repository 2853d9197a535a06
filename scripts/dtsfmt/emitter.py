"""Output of formatted files: in place, to stdout, or as a check report."""

import difflib
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from .errors import DtsfmtError

EMIT_MODES = ("files", "stdout")


@dataclass(frozen=True)
class FormattedFile:
    """Source text of one input next to its formatted version."""

    path: Path | None
    original_text: str
    formatted_text: str

    @property
    def display_name(self) -> str:
        return str(self.path) if self.path is not None else "<stdin>"

    @property
    def changed(self) -> bool:
        return self.original_text != self.formatted_text


class Emitter:
    """Base class for emitters.

    `emit` returns True when the file does not match its formatted version
    and the run should report failure.
    """

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def emit(self, result: FormattedFile) -> bool:
        raise NotImplementedError


class FilesEmitter(Emitter):
    """Writes formatted text over the original file when it changed."""

    def emit(self, result: FormattedFile) -> bool:
        if result.path is None:
            raise DtsfmtError("cannot format <stdin> and emit to files")
        if result.changed:
            result.path.write_text(result.formatted_text)
            print(f"Formatted {result.path}", file=self.stream)
        return False


class StdoutEmitter(Emitter):
    """Writes the formatted text to stdout."""

    def emit(self, result: FormattedFile) -> bool:
        self.stream.write(result.formatted_text)
        return False


class CheckEmitter(Emitter):
    """Reports a diff for every file that is not formatted."""

    def emit(self, result: FormattedFile) -> bool:
        if not result.changed:
            return False

        print(result.display_name, file=self.stream)
        diff = difflib.unified_diff(
            result.original_text.splitlines(keepends=True),
            result.formatted_text.splitlines(keepends=True),
            fromfile=f"{result.display_name} (original)",
            tofile=f"{result.display_name} (formatted)",
        )
        for line in diff:
            self.stream.write(line if line.endswith("\n") else line + "\n")
        return True


def create_emitter(mode: str, check: bool = False, stream: TextIO | None = None) -> Emitter:
    """Pick the emitter for the --emit mode; check mode overrides it."""
    if check:
        return CheckEmitter(stream)
    if mode == "files":
        return FilesEmitter(stream)
    if mode == "stdout":
        return StdoutEmitter(stream)
    raise ValueError(f"unknown emit mode '{mode}', expected one of {', '.join(EMIT_MODES)}")
