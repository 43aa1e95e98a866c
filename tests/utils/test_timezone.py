"""Tests for utils/timezone.py - UTC-everywhere time handling."""

from datetime import datetime, timedelta, timezone

import pytest

from utils.timezone import now_utc, to_utc, from_epoch, to_epoch


class TestNowUtc:
    """Tests for now_utc()."""

    def test_returns_timezone_aware(self):
        """Result must have tzinfo set (not naive)."""
        result = now_utc()
        assert result.tzinfo is not None

    def test_is_utc(self):
        """Result timezone must be specifically UTC."""
        result = now_utc()
        assert result.tzinfo == timezone.utc


class TestToUtc:
    """Tests for to_utc()."""

    def test_raises_on_naive(self):
        """Naive datetime must raise ValueError."""
        naive = datetime(2024, 1, 1, 12, 0, 0)
        with pytest.raises(ValueError, match="naive"):
            to_utc(naive)

    def test_converts_other_timezone(self):
        """12:00 at UTC-6 becomes 18:00 UTC."""
        central = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=-6)))
        result = to_utc(central)
        assert result.tzinfo == timezone.utc
        assert result.hour == 18


class TestEpoch:
    """Epoch seconds as carried in identity-provider sessions."""

    def test_from_epoch_is_utc(self):
        result = from_epoch(1700000000)
        assert result == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_to_epoch_whole_seconds(self):
        dt = datetime(2023, 11, 14, 22, 13, 20, 750000, tzinfo=timezone.utc)
        assert to_epoch(dt) == 1700000000

    def test_to_epoch_rejects_naive(self):
        with pytest.raises(ValueError):
            to_epoch(datetime(2024, 1, 1))

    def test_from_epoch_accepts_float(self):
        assert to_epoch(from_epoch(1700000000.5)) == 1700000000
