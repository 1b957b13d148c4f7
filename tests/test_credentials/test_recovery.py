"""Tests for keychain lock detection and recovery."""

from pathlib import Path
from unittest.mock import Mock, patch

import click
import pytest

from gog_secrets.credentials import (
    MacKeychainRecovery,
    NoopRecovery,
    get_platform_recovery,
    register_platform_recovery,
)
from gog_secrets.credentials.recovery import login_keychain_path
from gog_secrets.exceptions import NoTTYError, UnlockFailedError

KEYCHAIN = Path("/Users/me/Library/Keychains/login.keychain-db")


class TestNoopRecovery:
    def test_never_locked(self):
        recovery = NoopRecovery()

        assert recovery.is_locked() is False
        assert recovery.unlock() is None
        assert recovery.ensure_access() is None


class TestFactory:
    def test_darwin_gets_mac_recovery(self):
        assert isinstance(get_platform_recovery("Darwin"), MacKeychainRecovery)

    @pytest.mark.parametrize("system", ["Linux", "Windows", "FreeBSD"])
    def test_other_platforms_get_noop(self, system):
        assert isinstance(get_platform_recovery(system), NoopRecovery)

    def test_register_custom(self):
        custom = Mock()
        register_platform_recovery("PlanNine", lambda: custom)

        assert get_platform_recovery("plannine") is custom

    def test_login_keychain_path(self):
        path = login_keychain_path()

        assert path is not None
        assert path.name == "login.keychain-db"


class TestMacKeychainRecovery:
    @pytest.fixture
    def recovery(self):
        return MacKeychainRecovery(keychain_path=KEYCHAIN)

    @patch("gog_secrets.credentials.recovery.subprocess.run")
    def test_unlocked_on_success(self, mock_run, recovery):
        mock_run.return_value = Mock(returncode=0)

        assert recovery.is_locked() is False
        mock_run.assert_called_once()
        assert mock_run.call_args.args[0] == ["security", "show-keychain-info", str(KEYCHAIN)]

    @patch("gog_secrets.credentials.recovery.subprocess.run")
    def test_locked_on_failure(self, mock_run, recovery):
        mock_run.return_value = Mock(returncode=51)

        assert recovery.is_locked() is True

    @patch("gog_secrets.credentials.recovery.subprocess.run")
    def test_locked_when_query_cannot_run(self, mock_run, recovery):
        mock_run.side_effect = FileNotFoundError("security")

        assert recovery.is_locked() is True

    @patch("gog_secrets.credentials.recovery.subprocess.run")
    def test_unknown_path_is_not_locked(self, mock_run, recovery):
        recovery.keychain_path = None

        assert recovery.is_locked() is False
        mock_run.assert_not_called()

    @patch("gog_secrets.credentials.recovery.stdin_is_tty", return_value=False)
    def test_unlock_without_tty(self, _mock_tty, recovery):
        with pytest.raises(NoTTYError) as exc_info:
            recovery.unlock()

        assert "security unlock-keychain" in exc_info.value.suggestion

    def test_unlock_unknown_path(self, recovery):
        recovery.keychain_path = None

        with pytest.raises(UnlockFailedError):
            recovery.unlock()

    @patch("gog_secrets.credentials.recovery.subprocess.run")
    @patch("gog_secrets.credentials.recovery.click.prompt", return_value="hunter2")
    @patch("gog_secrets.credentials.recovery.stdin_is_tty", return_value=True)
    def test_unlock_sends_password_on_stdin(self, _mock_tty, mock_prompt, mock_run, recovery):
        mock_run.return_value = Mock(returncode=0)

        recovery.unlock()

        args = mock_run.call_args.args[0]
        assert args == ["security", "unlock-keychain", str(KEYCHAIN)]
        assert "hunter2" not in " ".join(args)
        assert mock_run.call_args.kwargs["input"] == "hunter2\n"
        assert mock_prompt.call_args.kwargs["hide_input"] is True

    @patch("gog_secrets.credentials.recovery.subprocess.run")
    @patch("gog_secrets.credentials.recovery.click.prompt", return_value="wrong")
    @patch("gog_secrets.credentials.recovery.stdin_is_tty", return_value=True)
    def test_unlock_failure(self, _mock_tty, _mock_prompt, mock_run, recovery):
        mock_run.return_value = Mock(returncode=51)

        with pytest.raises(UnlockFailedError):
            recovery.unlock()

    @patch("gog_secrets.credentials.recovery.click.prompt", side_effect=click.Abort())
    @patch("gog_secrets.credentials.recovery.stdin_is_tty", return_value=True)
    def test_unlock_aborted_prompt(self, _mock_tty, _mock_prompt, recovery):
        with pytest.raises(UnlockFailedError):
            recovery.unlock()

    def test_ensure_access_skips_unlock_when_unlocked(self, recovery):
        with patch.object(recovery, "is_locked", return_value=False), patch.object(recovery, "unlock") as unlock:
            recovery.ensure_access()

        unlock.assert_not_called()

    def test_ensure_access_unlocks_once(self, recovery):
        with patch.object(recovery, "is_locked", return_value=True), patch.object(recovery, "unlock") as unlock:
            recovery.ensure_access()

        unlock.assert_called_once()

    def test_ensure_access_propagates_unlock_failure(self, recovery):
        with patch.object(recovery, "is_locked", return_value=True), patch.object(
            recovery, "unlock", side_effect=UnlockFailedError("bad password")
        ):
            with pytest.raises(UnlockFailedError):
                recovery.ensure_access()
