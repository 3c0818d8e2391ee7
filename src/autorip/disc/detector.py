"""Finding every disc that is ready to rip."""

import asyncio
import logging
from dataclasses import dataclass, field

from autorip.config import AutoRipConfig
from autorip.disc.mount_waiter import MountWaiter
from autorip.disc.snapshot import (
    DriveSnapshotProvider,
    DriveStatusRecord,
    MountPollState,
    ready_discs,
)
from autorip.disc.title_selector import TitleSelection, TitleSelector
from autorip.error_handling import (
    CriticalVersionError,
    EngineOutputError,
    NoTitleFoundError,
)
from autorip.makemkv.runner import MakeMKVRunner
from autorip.rip.filesystem import sanitize_title

logger = logging.getLogger(__name__)


def folder_title(record: DriveStatusRecord) -> str:
    """Title usable as a folder name, or ``Disc<index>`` if nothing of it survives."""
    title = sanitize_title(record.media_title)
    return title if title.strip() else f"Disc{record.drive_index}"


@dataclass(frozen=True)
class ReadyDisc:
    """A mounted disc with its rip selection resolved."""

    drive_index: int
    raw_title: str
    sanitized_title: str
    media_type: str
    selection: TitleSelection

    def __str__(self) -> str:
        return f"{self.media_type} disc '{self.sanitized_title}' in drive {self.drive_index}"


@dataclass
class DetectionResult:
    discs: list[ReadyDisc] = field(default_factory=list)
    failed_titles: list[str] = field(default_factory=list)


class DiscDetector:
    """Snapshot drives, wait for late mounts, then pick a title per disc."""

    def __init__(
        self,
        config: AutoRipConfig,
        runner: MakeMKVRunner,
        *,
        provider: DriveSnapshotProvider | None = None,
        waiter: MountWaiter | None = None,
        selector: TitleSelector | None = None,
    ):
        self.config = config
        self.runner = runner
        self.provider = provider or DriveSnapshotProvider(runner)
        self.waiter = waiter or MountWaiter(
            self.provider,
            config.mount_wait_timeout,
            config.mount_poll_interval,
        )
        self.selector = selector or TitleSelector(config, runner)

    async def find_ready_drives(self) -> list[DriveStatusRecord]:
        """Initial snapshot plus any discs that mount while waiting."""
        logger.info("Getting info for all discs...")
        initial = await self.provider.snapshot()
        ready = ready_discs(initial)

        poll = MountPollState.from_records(initial)
        if poll.unmounted_count > 0:
            if self.waiter.enabled:
                logger.info(
                    "%d of %d inserted discs are not mounted yet",
                    poll.unmounted_count,
                    poll.total_drives,
                )
                ready.extend(await self.waiter.wait(initial))
            else:
                logger.info(
                    "%d inserted discs are not mounted and mount waiting is disabled",
                    poll.unmounted_count,
                )

        return ready

    async def _resolve(self, record: DriveStatusRecord) -> ReadyDisc:
        title = folder_title(record)
        logger.info("Getting file number for drive title %d-%s.", record.drive_index, title)
        selection = await self.selector.select_title(record.drive_index)
        logger.info("Got file info for %d-%s.", record.drive_index, title)
        return ReadyDisc(
            drive_index=record.drive_index,
            raw_title=record.media_title,
            sanitized_title=title,
            media_type=record.media_type,
            selection=selection,
        )

    async def detect(self) -> DetectionResult:
        """Return every ripable disc; discs whose titles cannot be read are listed as failed."""
        ready = await self.find_ready_drives()
        result = DetectionResult()
        if not ready:
            logger.info("No discs found")
            return result

        outcomes = await asyncio.gather(
            *(self._resolve(record) for record in ready),
            return_exceptions=True,
        )

        for record, outcome in zip(ready, outcomes, strict=True):
            if isinstance(outcome, CriticalVersionError):
                raise outcome
            if isinstance(outcome, NoTitleFoundError | EngineOutputError):
                title = folder_title(record)
                logger.error("Unable to read titles of %s: %s", title, outcome)
                result.failed_titles.append(title)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.discs.append(outcome)

        return result
