"""Choosing which title(s) of a disc to rip."""

import logging
from collections.abc import Iterable

from autorip.config import AutoRipConfig
from autorip.error_handling import NoOutputError, NoTitleFoundError
from autorip.makemkv.protocol import TitleLine, title_lines
from autorip.makemkv.runner import ALL_TITLES, MakeMKVRunner

logger = logging.getLogger(__name__)

TitleSelection = int | str


def choose_longest_title(records: Iterable[TitleLine]) -> int | None:
    """Index of the longest title, or None if no record has a valid length.

    Records are scanned in output order and a later title of equal length
    replaces an earlier one.
    """
    selected: int | None = None
    longest = -1
    for record in records:
        duration = record.duration_seconds
        if duration is None:
            continue
        if duration >= longest:
            longest = duration
            selected = record.title_index
    return selected


class TitleSelector:
    """Picks the title to rip for a disc."""

    def __init__(self, config: AutoRipConfig, runner: MakeMKVRunner):
        self.config = config
        self.runner = runner

    async def select_title(self, drive_index: int) -> TitleSelection:
        """Return the title index to rip, or ``"all"`` when ripping every title."""
        if self.config.rip_all_titles:
            return ALL_TITLES

        result = await self.runner.disc_info(drive_index)
        if not result.stdout.strip():
            raise NoOutputError(
                "No data received from MakeMKV",
                details=result.stderr.strip() or None,
            )
        self.runner.session.inspect(result.combined_output)

        selected = choose_longest_title(title_lines(result.stdout))
        if selected is None:
            raise NoTitleFoundError(
                drive_index,
                details="MakeMKV may not have identified any titles on this disc",
            )

        logger.debug("Drive %d: selected title %d", drive_index, selected)
        return selected
