"""Temporary date override for makemkvcon."""

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)

# Read by libfaketime in every child process started while it is set.
FAKETIME_ENV = "FAKETIME"


def faketime_value(fake_date: str) -> str:
    """Turn ``YYYY-MM-DD[ HH:MM[:SS]]`` into an absolute libfaketime timestamp."""
    date, _, time = fake_date.strip().partition(" ")
    if not time:
        time = "00:00:00"
    elif time.count(":") == 1:
        time += ":00"
    return f"@{date} {time}"


@contextmanager
def date_override(fake_date: str | None) -> Iterator[None]:
    """Set the date override for the duration of the block.

    The previous value (or its absence) is restored however the block exits.
    """
    if not fake_date:
        yield
        return

    if os.environ.get("DOCKER_CONTAINER") == "true":
        logger.warning(
            "Date override is not supported in Docker containers, ignoring fake_date. "
            "Change the host system date before starting the container instead.",
        )
        yield
        return

    previous = os.environ.get(FAKETIME_ENV)
    os.environ[FAKETIME_ENV] = faketime_value(fake_date)
    logger.info("Running MakeMKV with date set to %s", fake_date)
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop(FAKETIME_ENV, None)
        else:
            os.environ[FAKETIME_ENV] = previous
        logger.debug("Date override removed")
