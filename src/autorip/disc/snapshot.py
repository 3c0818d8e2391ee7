"""Drive snapshots from ``makemkvcon info disc:index``."""

import logging
from dataclasses import dataclass

from autorip.error_handling import NoOutputError, ProtocolError
from autorip.makemkv.protocol import DriveLine, drive_lines
from autorip.makemkv.runner import MakeMKVRunner

logger = logging.getLogger(__name__)

DriveStatusRecord = DriveLine


@dataclass(frozen=True)
class MountPollState:
    """Mount progress over the real drives of one snapshot."""

    total_drives: int
    mounted_count: int

    @property
    def unmounted_count(self) -> int:
        return self.total_drives - self.mounted_count

    @classmethod
    def from_records(cls, records: list[DriveStatusRecord]) -> "MountPollState":
        real = [r for r in records if not r.is_virtual_slot]
        return cls(
            total_drives=sum(1 for r in real if r.has_media),
            mounted_count=sum(1 for r in real if r.is_ready),
        )


def ready_discs(records: list[DriveStatusRecord]) -> list[DriveStatusRecord]:
    """Drives holding a mounted disc with a title, in drive order."""
    return sorted(
        (r for r in records if not r.is_virtual_slot and r.is_ready),
        key=lambda r: r.drive_index,
    )


class DriveSnapshotProvider:
    """Lists every drive MakeMKV knows about."""

    def __init__(self, runner: MakeMKVRunner):
        self.runner = runner

    @property
    def session(self):
        return self.runner.session

    async def snapshot(self) -> list[DriveStatusRecord]:
        """Return the state of all physical drives.

        Raises NoOutputError for empty output, CriticalVersionError when
        MakeMKV is too old and ProtocolError when no drive line is found.
        """
        result = await self.runner.list_drives()

        if not result.stdout.strip():
            raise NoOutputError(
                "No drive data received from MakeMKV",
                details=result.stderr.strip() or None,
            )

        self.session.inspect(result.combined_output)

        drives = list(drive_lines(result.stdout))
        if not drives:
            raise ProtocolError(
                "Invalid MakeMKV drive output format",
                details=result.stdout.strip()[:500],
            )

        records = [d for d in drives if not d.is_virtual_slot]
        logger.debug(
            "Snapshot: %d drive slots, %d physical drives",
            len(drives),
            len(records),
        )
        return records
