"""Decoding of MakeMKV robot-mode (``makemkvcon -r``) output.

Every line of robot output is ``PREFIX:field,field,...``. Fields may be
double-quoted and quoted fields may contain commas. Each line is decoded once
into one of the record types below; anything that does not fit a known shape
becomes :class:`Unrecognized` and is ignored by callers.
"""

import csv
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DRIVE_PREFIX = "DRV"
TITLE_PREFIX = "TINFO"
MESSAGE_PREFIX = "MSG"

# Drive states reported in field 1 of DRV lines.
DRIVE_STATE_EMPTY_CLOSED = 0
DRIVE_STATE_EMPTY_OPEN = 1
DRIVE_STATE_INSERTED = 2
DRIVE_STATE_LOADING = 3
DRIVE_STATE_NO_DRIVE = 256

# TINFO attribute carrying the title length as H:MM:SS.
TITLE_DURATION_CODE = 9

# MSG codes the application reacts to.
MSG_VERSION_INFO = 1005
MSG_VERSION_TOO_OLD = 5021
MSG_COPY_COMPLETE = 5036
MSG_UPDATE_AVAILABLE = 5075

BLU_RAY_DEVICE_TOKEN = "BD-ROM"
MEDIA_TYPE_BLU_RAY = "blu-ray"
MEDIA_TYPE_DVD = "dvd"

# Plain-text completion line printed by some makemkvcon builds.
COPY_COMPLETE_TEXT = "Copy complete"


@dataclass(frozen=True)
class DriveLine:
    """One optical drive slot and its current state."""

    drive_index: int
    state_code: int
    device_description: str
    media_title: str

    @property
    def is_virtual_slot(self) -> bool:
        """Slot reported by MakeMKV with no physical drive behind it."""
        return self.state_code == DRIVE_STATE_NO_DRIVE

    @property
    def has_media(self) -> bool:
        """A disc is physically in the drive, mounted or not."""
        return self.state_code in (DRIVE_STATE_INSERTED, DRIVE_STATE_LOADING)

    @property
    def is_ready(self) -> bool:
        """Disc is mounted and carries a title, so it can be ripped."""
        return self.state_code == DRIVE_STATE_INSERTED and bool(self.media_title)

    @property
    def media_type(self) -> str:
        if BLU_RAY_DEVICE_TOKEN in self.device_description:
            return MEDIA_TYPE_BLU_RAY
        return MEDIA_TYPE_DVD


@dataclass(frozen=True)
class TitleLine:
    """A single attribute of a title (``TINFO``)."""

    title_index: int
    attribute_code: int
    value: str

    @property
    def duration_seconds(self) -> int | None:
        """Length of the title, or None if this is not a valid length attribute."""
        if self.attribute_code != TITLE_DURATION_CODE:
            return None
        return parse_duration(self.value)


@dataclass(frozen=True)
class MessageLine:
    """A numbered status message (``MSG``)."""

    code: int
    text: str
    params: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Unrecognized:
    """A line that is not one of the known record shapes."""

    raw: str


ProtocolRecord = DriveLine | TitleLine | MessageLine | Unrecognized


def split_fields(line: str) -> list[str]:
    """Split one robot line on commas, honouring and stripping double quotes."""
    try:
        return next(csv.reader([line], skipinitialspace=False))
    except (csv.Error, StopIteration):
        return []


def parse_duration(value: str) -> int | None:
    """Convert ``H:MM:SS`` into seconds."""
    parts = value.strip().strip('"').split(":")
    if len(parts) != 3:
        return None
    try:
        hours, minutes, seconds = (int(p) for p in parts)
    except ValueError:
        return None
    if hours < 0 or minutes < 0 or seconds < 0:
        return None
    return hours * 3600 + minutes * 60 + seconds


def _parse_int(value: str) -> int | None:
    try:
        return int(value.strip())
    except ValueError:
        return None


def parse_line(line: str) -> ProtocolRecord:
    """Decode a single robot-mode line."""
    stripped = line.strip()
    prefix, sep, rest = stripped.partition(":")
    if not sep:
        return Unrecognized(line)

    fields = split_fields(rest)
    if not fields:
        return Unrecognized(line)

    if prefix == DRIVE_PREFIX:
        if len(fields) < 6:
            return Unrecognized(line)
        index = _parse_int(fields[0])
        state = _parse_int(fields[1])
        if index is None or state is None:
            return Unrecognized(line)
        return DriveLine(
            drive_index=index,
            state_code=state,
            device_description=fields[4],
            media_title=fields[5],
        )

    if prefix == TITLE_PREFIX:
        if len(fields) < 4:
            return Unrecognized(line)
        index = _parse_int(fields[0])
        code = _parse_int(fields[1])
        if index is None or code is None:
            return Unrecognized(line)
        return TitleLine(title_index=index, attribute_code=code, value=fields[3])

    if prefix == MESSAGE_PREFIX:
        code = _parse_int(fields[0])
        if code is None:
            return Unrecognized(line)
        text = fields[3] if len(fields) > 3 else ""
        params = tuple(fields[5:])
        return MessageLine(code=code, text=text, params=params)

    return Unrecognized(line)


def parse_lines(text: str) -> Iterator[ProtocolRecord]:
    """Lazily decode every non-blank line of ``text``."""
    for line in text.splitlines():
        if line.strip():
            yield parse_line(line)


def drive_lines(text: str) -> Iterator[DriveLine]:
    return (r for r in parse_lines(text) if isinstance(r, DriveLine))


def title_lines(text: str) -> Iterator[TitleLine]:
    return (r for r in parse_lines(text) if isinstance(r, TitleLine))


def message_lines(text: str) -> Iterator[MessageLine]:
    return (r for r in parse_lines(text) if isinstance(r, MessageLine))


def has_message(text: str, code: int) -> bool:
    return any(m.code == code for m in message_lines(text))


def is_copy_complete(text: str) -> bool:
    """Return True if the rip output contains the completion message."""
    if not text:
        return False
    if has_message(text, MSG_COPY_COMPLETE):
        return True
    return any(line.startswith(COPY_COMPLETE_TEXT) for line in text.splitlines())
