"""Tests for the lanegraph exception hierarchy."""

import pytest

from lanegraph.exceptions import (
    ConfigurationError,
    CyclicHistoryError,
    GitCommandError,
    HistoryFormatError,
    HistorySourceError,
    InvalidConfigError,
    LaneGraphError,
    LayoutError,
    UnknownStrategyError,
)


class TestLaneGraphError:
    """Test the base error."""

    def test_message_only(self):
        assert str(LaneGraphError("boom")) == "boom"

    def test_details_appended(self):
        error = LaneGraphError("boom", details={"a": "1", "b": "2"})
        assert str(error) == "boom (a=1, b=2)"

    @pytest.mark.parametrize(
        "error",
        [
            InvalidConfigError("strategy", "x", "bad"),
            CyclicHistoryError(["a"]),
            UnknownStrategyError("x", ["branch-first"]),
            GitCommandError(["git", "log"], 1, "fatal"),
            HistoryFormatError("f.json", "bad"),
        ],
    )
    def test_all_errors_share_base(self, error):
        assert isinstance(error, LaneGraphError)


class TestSpecificErrors:
    """Test error payloads."""

    def test_invalid_config(self):
        error = InvalidConfigError("max_commits", 0, "must be at least 1")
        assert isinstance(error, ConfigurationError)
        assert error.details["reason"] == "must be at least 1"

    def test_cycle_sorted_and_previewed(self):
        error = CyclicHistoryError(["f" * 40, "a" * 40, "c" * 40, "d" * 40, "e" * 40, "b" * 40])
        assert isinstance(error, LayoutError)
        assert error.cycle[0] == "a" * 40
        assert error.details["size"] == "6"
        assert error.details["commits"].endswith(", ...")

    def test_unknown_strategy_lists_available(self):
        error = UnknownStrategyError("zigzag", {"row-by-row", "branch-first"})
        assert error.available == ["branch-first", "row-by-row"]
        assert "branch-first, row-by-row" in str(error)

    def test_git_command_error(self):
        error = GitCommandError(["git", "log"], 128, "fatal: not a git repository\n")
        assert isinstance(error, HistorySourceError)
        assert error.details["stderr"] == "fatal: not a git repository"
        assert "git log" in str(error)
