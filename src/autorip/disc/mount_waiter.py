"""Waiting for inserted discs to finish mounting."""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from enum import Enum

from autorip.disc.snapshot import (
    DriveSnapshotProvider,
    DriveStatusRecord,
    MountPollState,
    ready_discs,
)
from autorip.error_handling import EngineOutputError

logger = logging.getLogger(__name__)


class MountWaitState(Enum):
    """Where the waiter currently is."""

    POLLING = "polling"
    SETTLED = "settled"
    TIMED_OUT = "timed_out"


class MountWaiter:
    """Poll drive snapshots until every inserted disc is mounted or time runs out."""

    def __init__(
        self,
        provider: DriveSnapshotProvider,
        wait_timeout: int,
        poll_interval: int,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if poll_interval <= 0:
            msg = "poll_interval must be positive"
            raise ValueError(msg)
        self.provider = provider
        self.wait_timeout = wait_timeout
        self.poll_interval = poll_interval
        self._sleep = sleep
        self.state = MountWaitState.POLLING
        self.attempts = 0

    @property
    def max_attempts(self) -> int:
        return math.ceil(self.wait_timeout / self.poll_interval)

    @property
    def enabled(self) -> bool:
        return self.wait_timeout > 0

    async def _poll(self) -> list[DriveStatusRecord] | None:
        """Take a snapshot, or None if this attempt failed."""
        try:
            return await self.provider.snapshot()
        except (EngineOutputError, OSError) as e:
            logger.warning("Drive check failed while waiting for discs to mount: %s", e)
            return None

    async def wait(
        self,
        initial: list[DriveStatusRecord] | None = None,
    ) -> list[DriveStatusRecord]:
        """Wait for mounting discs and return only the newly ready ones.

        ``initial`` is the snapshot the caller already acted on; when omitted
        a fresh one is taken. Discs already ready in it are never returned.
        """
        if not self.enabled:
            logger.debug("Mount wait disabled, not polling")
            self.state = MountWaitState.SETTLED
            return []

        if initial is None:
            initial = await self.provider.snapshot()
        known = {r.drive_index for r in ready_discs(initial)}

        def new_discs(records: list[DriveStatusRecord]) -> list[DriveStatusRecord]:
            return [r for r in ready_discs(records) if r.drive_index not in known]

        self.state = MountWaitState.POLLING
        self.attempts = 0
        logger.info(
            "Waiting up to %ss for inserted discs to mount...",
            self.wait_timeout,
        )

        for attempt in range(1, self.max_attempts + 1):
            self.attempts = attempt
            records = await self._poll()

            if records is not None:
                poll = MountPollState.from_records(records)
                logger.debug(
                    "Mount check %d/%d: %d of %d discs mounted",
                    attempt,
                    self.max_attempts,
                    poll.mounted_count,
                    poll.total_drives,
                )
                if poll.unmounted_count == 0:
                    self.state = MountWaitState.SETTLED
                    found = new_discs(records)
                    if found:
                        logger.info("%d more disc(s) finished mounting", len(found))
                    return found

            if attempt < self.max_attempts:
                await self._sleep(self.poll_interval)

        self.state = MountWaitState.TIMED_OUT
        logger.warning(
            "Some discs did not mount within %ss, continuing with the discs that did",
            self.wait_timeout,
        )
        records = await self._poll()
        if records is None:
            return []
        return new_discs(records)
