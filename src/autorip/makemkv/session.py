"""Per-run MakeMKV session state."""

import logging

from autorip.error_handling import CriticalVersionError
from autorip.makemkv.protocol import (
    MSG_UPDATE_AVAILABLE,
    MSG_VERSION_INFO,
    MSG_VERSION_TOO_OLD,
    message_lines,
)

logger = logging.getLogger(__name__)


class EngineSession:
    """State shared by every makemkvcon invocation of one process.

    Version advisories are only reported for the first output inspected.
    Once MakeMKV reports that it is too old the session is aborted and no
    further invocations are allowed.
    """

    def __init__(self) -> None:
        self.version_checked = False
        self.aborted = False
        self.version: str | None = None

    def ensure_usable(self) -> None:
        """Refuse to talk to MakeMKV after a fatal version report."""
        if self.aborted:
            raise CriticalVersionError(
                details="MakeMKV already reported a fatal version error in this session",
            )

    def inspect(self, output: str) -> None:
        """Check engine output for version messages.

        Raises CriticalVersionError whenever the too-old message is present,
        regardless of how many times the session has been used.
        """
        first_call = not self.version_checked
        self.version_checked = True

        for message in message_lines(output):
            if message.code == MSG_VERSION_TOO_OLD:
                self.aborted = True
                logger.error(
                    "The installed version of MakeMKV is too old, please update to the latest version",
                )
                raise CriticalVersionError(details=message.text or None)

            if not first_call:
                continue

            if message.code == MSG_VERSION_INFO:
                self.version = message.params[0] if message.params else message.text
                logger.info("%s is installed", self.version)
            elif message.code == MSG_UPDATE_AVAILABLE:
                logger.warning(
                    "There's a new version of MakeMKV available, it's highly "
                    "recommended to update to the latest version to avoid any potential bugs.",
                )
