"""Tests for workboard.notifications module."""

import subprocess
from unittest.mock import MagicMock, patch

from workboard.notifications import (
    MAX_NOTIFICATION_LENGTH,
    notify,
    notify_estimation_complete,
    notify_fetch_failed,
)


class TestNotify:
    """Tests for notify."""

    @patch("workboard.notifications.subprocess.run")
    @patch("workboard.notifications.shutil.which", return_value=None)
    def test_skipped_without_notify_send(self, mock_which, mock_run):
        notify("Title", "Body")
        mock_run.assert_not_called()

    @patch("workboard.notifications.subprocess.run")
    @patch("workboard.notifications.shutil.which", return_value="/usr/bin/notify-send")
    def test_command(self, mock_which, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        notify("Title", "Body", "low")
        cmd = mock_run.call_args[0][0]
        assert cmd == ["notify-send", "--urgency", "low", "--app-name", "Workboard", "Title", "Body"]

    @patch("workboard.notifications.subprocess.run")
    @patch("workboard.notifications.shutil.which", return_value="/usr/bin/notify-send")
    def test_invalid_urgency(self, mock_which, mock_run, caplog):
        mock_run.return_value = MagicMock(returncode=0)
        notify("Title", "Body", "panic")
        assert "normal" in mock_run.call_args[0][0]
        assert "Invalid urgency 'panic'" in caplog.text

    @patch("workboard.notifications.subprocess.run")
    @patch("workboard.notifications.shutil.which", return_value="/usr/bin/notify-send")
    def test_long_message_truncated(self, mock_which, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        notify("Title", "x" * 500)
        body = mock_run.call_args[0][0][-1]
        assert len(body) == MAX_NOTIFICATION_LENGTH + 3

    @patch("workboard.notifications.subprocess.run")
    @patch("workboard.notifications.shutil.which", return_value="/usr/bin/notify-send")
    def test_timeout_logged(self, mock_which, mock_run, caplog):
        mock_run.side_effect = subprocess.TimeoutExpired("notify-send", 5)
        notify("Title", "Body")
        assert "timed out" in caplog.text

    @patch("workboard.notifications.subprocess.run")
    @patch("workboard.notifications.shutil.which", return_value="/usr/bin/notify-send")
    def test_failure_logged(self, mock_which, mock_run, caplog):
        mock_run.return_value = MagicMock(returncode=1, stderr="no dbus")
        notify("Title", "Body")
        assert "no dbus" in caplog.text


class TestHelpers:
    """Tests for the canned notifications."""

    @patch("workboard.notifications.notify")
    def test_estimation_complete(self, mock_notify):
        notify_estimation_complete("JOB-7")
        mock_notify.assert_called_once_with("Workboard: JOB-7", "Estimation completed", "normal")

    @patch("workboard.notifications.notify")
    def test_fetch_failed(self, mock_notify):
        notify_fetch_failed("HTTP 502")
        title, message, urgency = mock_notify.call_args[0]
        assert "HTTP 502" in message
        assert urgency == "critical"
