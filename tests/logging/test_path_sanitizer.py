"""Tests for log-safe path display"""

import pytest

from warden.logging.path_sanitizer import (
    INVALID_PATH,
    REDACTED_CONTROL_CHARS,
    REDACTED_PATH_TOO_LONG,
    REDACTED_SENSITIVE_DIR,
    REDACTED_SENSITIVE_FILE,
    contains_sensitive_dir,
    home_directory,
    matches_sensitive_pattern,
    sanitize_path,
)

HOME = "/home/alice"


class TestSanitizePathUnix:
    def test_private_key_under_home(self):
        result = sanitize_path("/home/alice/.ssh/id_rsa", platform="linux", home=HOME)
        assert result == REDACTED_SENSITIVE_FILE
        assert "alice" not in result
        assert "id_rsa" not in result

    def test_home_prefix_becomes_tilde(self):
        assert sanitize_path("/home/alice/projects/app", platform="linux", home=HOME) == "~/projects/app"

    def test_home_itself(self):
        assert sanitize_path("/home/alice", platform="linux", home=HOME) == "~"

    def test_home_prefix_respects_component_boundary(self):
        assert sanitize_path("/home/alicex/app", platform="linux", home=HOME) == "/home/alicex/app"

    def test_sensitive_directory(self):
        assert sanitize_path("/home/alice/.ssh/config", platform="linux", home=HOME) == REDACTED_SENSITIVE_DIR

    def test_similar_directory_name_is_not_sensitive(self):
        result = sanitize_path("/home/alice/.ssh-backup/notes", platform="linux", home=HOME)
        assert result == "~/.ssh-backup/notes"

    def test_system_file(self):
        assert sanitize_path("/etc/shadow", platform="linux", home=HOME) == REDACTED_SENSITIVE_DIR

    @pytest.mark.parametrize(
        "path",
        ["/srv/app/.env", "/srv/app/.env.local", "/srv/tls/server.pem", "/tmp/API_TOKEN.txt"],
    )
    def test_sensitive_file_patterns(self, path):
        assert sanitize_path(path, platform="linux", home=HOME) == REDACTED_SENSITIVE_FILE

    def test_home_defaults_to_environment(self, home_dir):
        assert sanitize_path(str(home_dir / "work"), platform="linux") == "~/work"


class TestSanitizePathWindows:
    def test_appdata_roaming(self):
        path = "C:\\Users\\Bob\\AppData\\Roaming\\app\\settings.json"
        assert sanitize_path(path, platform="win32", home="C:\\Users\\Bob") == REDACTED_SENSITIVE_DIR

    def test_case_insensitive_directory_match(self):
        path = "C:\\Users\\Bob\\.SSH\\config"
        assert sanitize_path(path, platform="win32", home="C:\\Users\\Bob") == REDACTED_SENSITIVE_DIR

    def test_home_uses_forward_slashes(self):
        path = "C:\\Users\\Bob\\Documents\\report.txt"
        assert sanitize_path(path, platform="win32", home="C:\\Users\\Bob") == "~/Documents/report.txt"

    def test_home_directory_from_drive_and_path(self, monkeypatch):
        monkeypatch.setenv("HOMEDRIVE", "D:")
        monkeypatch.setenv("HOMEPATH", "\\Users\\Bob")
        assert home_directory("win32") == "D:\\Users\\Bob"

    def test_home_directory_falls_back_to_userprofile(self, monkeypatch):
        monkeypatch.delenv("HOMEDRIVE", raising=False)
        monkeypatch.delenv("HOMEPATH", raising=False)
        monkeypatch.setenv("USERPROFILE", "C:\\Users\\Carol")
        assert home_directory("win32") == "C:\\Users\\Carol"


class TestUncPaths:
    def test_server_name_hidden(self):
        result = sanitize_path("\\\\fileserver\\share\\docs\\report.txt", platform="linux", home=HOME)
        assert result == "//[REDACTED]/share/docs/report.txt"
        assert "fileserver" not in result

    def test_sensitive_file_on_share(self):
        result = sanitize_path("\\\\fileserver\\share\\id_rsa", platform="linux", home=HOME)
        assert result == REDACTED_SENSITIVE_FILE


class TestRejectedInput:
    @pytest.mark.parametrize("value", [None, "", 42, b"/tmp"])
    def test_invalid(self, value):
        assert sanitize_path(value) == INVALID_PATH

    def test_control_characters(self):
        assert sanitize_path("/tmp/a\x1b[31m") == REDACTED_CONTROL_CHARS

    def test_too_long(self):
        assert sanitize_path("/" + "a" * 4096) == REDACTED_PATH_TOO_LONG


def test_contains_sensitive_dir_matches_whole_components():
    assert contains_sensitive_dir("/home/u/.aws/credentials", "linux") is True
    assert contains_sensitive_dir("/home/u/.config/gcloud/x", "linux") is True
    assert contains_sensitive_dir("/home/u/config/gcloud", "linux") is False
    assert contains_sensitive_dir("/home/u/.awsome", "linux") is False


def test_contains_sensitive_dir_over_long_input():
    assert contains_sensitive_dir("/" + "a" * 5000, "linux") is True


def test_matches_sensitive_pattern():
    assert matches_sensitive_pattern("/keys/Private_Key.txt") is True
    assert matches_sensitive_pattern("/srv/app/main.py") is False
