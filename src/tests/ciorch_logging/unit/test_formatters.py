"""Tests for ciorch_logging.formatters."""

import logging

import pytest

from ciorch_logging import ColoredFormatter, SafeFormatter


def _record(msg: str, args: tuple = (), level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("ciorch.test", level, __file__, 1, msg, args, None)


@pytest.mark.unit
class TestSafeFormatter:
    """Tests for SafeFormatter."""

    def test_formats_message(self) -> None:
        """Test normal %-style formatting."""
        text = SafeFormatter("%(levelname)s %(message)s").format(_record("cap %d", (4,)))
        assert text == "INFO cap 4"

    def test_shortens_warning(self) -> None:
        """Test the WARN level name."""
        record = _record("careful", level=logging.WARNING)
        assert SafeFormatter("%(levelname)s").format(record) == "WARN"

    def test_mismatched_args(self) -> None:
        """Test that bad arguments keep the raw message."""
        text = SafeFormatter("%(message)s").format(_record("cap %d %d", (4,)))
        assert text.startswith("cap %d %d")


@pytest.mark.unit
class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def test_no_colors_when_disabled(self) -> None:
        """Test plain output with colours off."""
        formatter = ColoredFormatter("%(levelname)s %(message)s", include_colors=False)
        assert formatter.format(_record("done")) == "INFO done"

    def test_colors_on_terminal(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the level name is wrapped in an escape sequence."""
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setattr(ColoredFormatter, "_should_use_colors", staticmethod(lambda: True))

        text = ColoredFormatter("%(levelname)s %(message)s").format(_record("done"))

        assert text == f"{ColoredFormatter.COLORS['INFO']}INFO{ColoredFormatter.RESET} done"

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that NO_COLOR disables colours."""
        monkeypatch.setenv("NO_COLOR", "1")
        assert not ColoredFormatter._should_use_colors()
