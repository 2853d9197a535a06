"""Loader for formatting case files.

A case file holds any number of cases. Each starts with a message line and
has the input and the expected output separated by an `[expect]` line:

    == blank line after includes ==
    #include <behaviors.dtsi>
    / {
    };

    [expect]
    #include <behaviors.dtsi>

    / {
    };

A message containing `(only)` restricts the run to the cases marked that way.
"""

from dataclasses import dataclass
from pathlib import Path

MESSAGE_SEPARATOR = "=="
EXPECT_MARKER = "[expect]"


@dataclass(frozen=True)
class FormatCase:
    message: str
    file_text: str
    expected_text: str
    is_only: bool = False
    source: str = ""


def parse_cases(text: str, source: str = "") -> list[FormatCase]:
    lines = text.split("\n")
    if not lines[0].startswith(MESSAGE_SEPARATOR):
        raise ValueError(f"{source or 'case file'} must start with a message line, e.g. '== message =='")

    starts = [i for i, line in enumerate(lines) if line.startswith(MESSAGE_SEPARATOR)]
    ends = [*starts[1:], len(lines)]
    return [_parse_case(lines[start], lines[start + 1:end], source) for start, end in zip(starts, ends)]


def _parse_case(message_line: str, lines: list[str], source: str) -> FormatCase:
    body = "\n".join(lines)
    if EXPECT_MARKER not in body:
        raise ValueError(f"{source}: case '{message_line}' has no {EXPECT_MARKER} line")

    before, after = body.split(EXPECT_MARKER, 1)
    return FormatCase(
        message=message_line.strip("= ").strip(),
        file_text=before.removesuffix("\n"),
        expected_text=after.removeprefix("\n"),
        is_only="(only)" in message_line.lower(),
        source=source,
    )


def load_cases(directory: Path) -> list[FormatCase]:
    cases = []
    for path in sorted(directory.glob("*.txt")):
        cases.extend(parse_cases(path.read_text(), source=path.name))
    return cases
