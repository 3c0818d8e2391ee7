"""Async invocation of makemkvcon."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from autorip.config import AutoRipConfig
from autorip.error_handling import ExecutableNotFoundError
from autorip.makemkv.session import EngineSession

logger = logging.getLogger(__name__)

ALL_DRIVES_TARGET = "disc:index"
RIP_VERB = "mkv"
ALL_TITLES = "all"


@dataclass
class EngineResult:
    """Captured result of one makemkvcon process."""

    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def combined_output(self) -> str:
        if self.stderr:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout


class MakeMKVRunner:
    """Builds and runs makemkvcon robot-mode commands."""

    def __init__(self, config: AutoRipConfig, session: EngineSession | None = None):
        self.config = config
        self.session = session or EngineSession()

    def list_drives_args(self) -> list[str]:
        return ["-r", "info", ALL_DRIVES_TARGET]

    def disc_info_args(self, drive_index: int) -> list[str]:
        return ["-r", "info", f"disc:{drive_index}"]

    def rip_args(self, drive_index: int, selection: int | str, output_dir: Path) -> list[str]:
        return ["-r", RIP_VERB, f"disc:{drive_index}", str(selection), str(output_dir)]

    async def run(self, args: list[str]) -> EngineResult:
        """Run makemkvcon with ``args`` and wait for it to exit."""
        self.session.ensure_usable()
        executable = self.config.makemkv_con
        cmd = [executable, *args]
        logger.debug("Running: %s", " ".join(cmd))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ExecutableNotFoundError(executable, original_error=e) from e

        stdout, stderr = await proc.communicate()
        return EngineResult(
            args=cmd,
            returncode=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    async def list_drives(self) -> EngineResult:
        return await self.run(self.list_drives_args())

    async def disc_info(self, drive_index: int) -> EngineResult:
        return await self.run(self.disc_info_args(drive_index))

    async def rip(self, drive_index: int, selection: int | str, output_dir: Path) -> EngineResult:
        return await self.run(self.rip_args(drive_index, selection, output_dir))
