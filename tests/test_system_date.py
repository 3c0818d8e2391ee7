"""Tests for the MakeMKV date override."""

import os

import pytest

from autorip.system_date import FAKETIME_ENV, date_override, faketime_value


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(FAKETIME_ENV, raising=False)
    monkeypatch.delenv("DOCKER_CONTAINER", raising=False)


class TestFaketimeValue:
    """Test libfaketime timestamp formatting."""

    @pytest.mark.parametrize(
        ("fake_date", "expected"),
        [
            ("2024-01-01", "@2024-01-01 00:00:00"),
            ("2024-01-01 12:30", "@2024-01-01 12:30:00"),
            ("2024-01-01 12:30:15", "@2024-01-01 12:30:15"),
        ],
    )
    def test_formats(self, fake_date, expected):
        assert faketime_value(fake_date) == expected


class TestDateOverride:
    """Test setting and restoring the override."""

    def test_set_and_removed(self):
        with date_override("2024-01-01"):
            assert os.environ[FAKETIME_ENV] == "@2024-01-01 00:00:00"

        assert FAKETIME_ENV not in os.environ

    def test_previous_value_restored(self, monkeypatch):
        monkeypatch.setenv(FAKETIME_ENV, "+1d")

        with date_override("2024-01-01"):
            pass

        assert os.environ[FAKETIME_ENV] == "+1d"

    def test_restored_on_error(self):
        with pytest.raises(RuntimeError):
            with date_override("2024-01-01"):
                raise RuntimeError("rip failed")

        assert FAKETIME_ENV not in os.environ

    def test_no_date_does_nothing(self):
        with date_override(None):
            assert FAKETIME_ENV not in os.environ

    def test_ignored_in_docker(self, monkeypatch):
        monkeypatch.setenv("DOCKER_CONTAINER", "true")

        with date_override("2024-01-01"):
            assert FAKETIME_ENV not in os.environ
