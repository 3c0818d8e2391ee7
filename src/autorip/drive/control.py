"""Loading and ejecting optical drive trays."""

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CDROM_INFO = Path("/proc/sys/dev/cdrom/info")


@dataclass(frozen=True)
class OpticalDrive:
    """A physical drive the operating system knows about."""

    device: str


def list_linux_drives(info_path: Path = CDROM_INFO) -> list[OpticalDrive]:
    """Optical drives listed by the kernel's cdrom driver."""
    try:
        info = info_path.read_text()
    except OSError:
        logger.warning("Could not read %s", info_path)
        return []

    for line in info.splitlines():
        if line.startswith("drive name:"):
            names = line.split(":", 1)[1].split()
            return [OpticalDrive(f"/dev/{name}") for name in names if name.startswith("sr")]
    return []


class DriveControl:
    """Open and close every optical drive tray.

    Failures are logged and never raised; a tray that cannot be moved
    must not stop a run.
    """

    def __init__(
        self,
        platform: str | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.platform = platform or sys.platform
        self._sleep = sleep

    def drives(self) -> list[OpticalDrive]:
        if self.platform.startswith("linux"):
            return list_linux_drives()
        if self.platform == "darwin":
            return [OpticalDrive("default")]
        return []

    def eject_command(self, drive: OpticalDrive) -> list[str]:
        if self.platform == "darwin":
            return ["drutil", "tray", "open"]
        return ["eject", drive.device]

    def load_command(self, drive: OpticalDrive) -> list[str]:
        if self.platform == "darwin":
            return ["drutil", "tray", "close"]
        return ["eject", "-t", drive.device]

    async def _run(self, cmd: list[str]) -> bool:
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.warning("Could not run %s: %s", cmd[0], e)
            return False

        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            logger.warning(
                "%s exited with code %s: %s",
                " ".join(cmd),
                proc.returncode,
                stderr.decode("utf-8", errors="replace").strip(),
            )
            return False
        return True

    async def _apply(self, build: Callable[[OpticalDrive], list[str]], action: str) -> int:
        drives = self.drives()
        if not drives:
            logger.warning("No optical drives found to %s on %s", action, self.platform)
            return 0

        results = await asyncio.gather(*(self._run(build(d)) for d in drives))
        for drive, ok in zip(drives, results, strict=True):
            if not ok:
                logger.warning("Failed to %s drive %s", action, drive.device)
        return sum(results)

    async def eject_all(self) -> int:
        """Eject every drive; returns how many trays opened."""
        count = await self._apply(self.eject_command, "eject")
        logger.info("All drives have been ejected.")
        return count

    async def load_all(self) -> int:
        """Close every tray; returns how many trays closed."""
        count = await self._apply(self.load_command, "load")
        logger.info("All drives have been loaded/closed.")
        return count

    async def load_with_wait(self, delay: int = 0) -> None:
        """Close all trays, then give slow drives time to spin up."""
        await self.load_all()
        logger.warning("Please manually close any drives that were not automatically closed.")
        wait = 5 + delay
        logger.warning("Waiting %s seconds...", wait)
        await self._sleep(wait)
        logger.info("Drive loading complete. Ready to proceed.")
