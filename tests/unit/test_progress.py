from __future__ import annotations

from unittest.mock import Mock, patch

from shiftmark.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


class TestProgressTracker:
    """ProgressTracker over roster files."""

    def test_init_with_tty_enabled(self):
        with patch("shiftmark.services.progress.is_tty_enabled", return_value=True), \
             patch("shiftmark.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(3)
            assert tracker.enabled is True
            mock_tqdm.assert_called_once_with(
                total=3,
                desc="Annotating rosters",
                unit="file",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_disabled_when_not_requested(self):
        with patch("shiftmark.services.progress.is_tty_enabled", return_value=True), \
             patch("shiftmark.services.progress.tqdm") as mock_tqdm:
            tracker = ProgressTracker(3, enabled=False)
            assert tracker.enabled is False
            assert tracker.pbar is None
            mock_tqdm.assert_not_called()

    def test_disabled_without_tty(self):
        with patch("shiftmark.services.progress.is_tty_enabled", return_value=False):
            tracker = ProgressTracker(3)
            assert tracker.pbar is None
            tracker.start_file("a.xlsx")
            tracker.finish_file(4)
            tracker.close()
            assert tracker.current_file == 1

    def test_file_lifecycle_updates_bar(self):
        mock_pbar = Mock()
        with patch("shiftmark.services.progress.is_tty_enabled", return_value=True), \
             patch("shiftmark.services.progress.tqdm", return_value=mock_pbar):
            with ProgressTracker(2, description="Rosters") as tracker:
                tracker.start_file("a.xlsx")
                mock_pbar.set_description.assert_called_with("Rosters (a.xlsx)")
                tracker.finish_file(5)
                mock_pbar.update.assert_called_once_with(1)
                mock_pbar.set_postfix.assert_called_once_with(cells=5)
            mock_pbar.close.assert_called_once()
            assert tracker.pbar is None
