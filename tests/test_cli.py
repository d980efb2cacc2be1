"""Unit tests for cli.py."""

import json
from unittest.mock import patch

import pytest

from rscmp_client import cli

from conftest import make_response, research_payload, user_payload


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Point the CLI at a temporary storage directory and a fake backend."""
    monkeypatch.setenv("RSCMP_BASE_URL", "http://rscmp.test/api")
    monkeypatch.setenv("RSCMP_STORAGE_DIR", str(tmp_path / "state"))
    monkeypatch.setenv("RSCMP_LANGUAGE", "en")
    return tmp_path


@pytest.fixture
def http():
    """Patch the requests session used by the CLI."""
    with patch("rscmp_client.client.transport.requests.Session") as session_cls:
        session = session_cls.return_value
        session.headers = {}
        yield session


def write_session(tmp_path, role="Reviewer"):
    state = tmp_path / "state"
    state.mkdir(exist_ok=True)
    (state / "rscmp-auth.json").write_text(
        json.dumps({"accessToken": "tok", "refreshToken": "ref", "selectedRole": role}),
        encoding="utf-8",
    )


class TestParseArgs:
    """Test argument parsing."""

    def test_global_options(self):
        """Test global options precede the subcommand."""
        args = cli.parse_args(["--format", "github", "--lang", "ar", "reviews", "--completed"])
        assert args.format == "github"
        assert args.lang == "ar"
        assert args.command == "reviews"
        assert args.completed

    def test_command_required(self):
        """Test a subcommand is mandatory."""
        with pytest.raises(SystemExit):
            cli.parse_args([])


class TestCommands:
    """Test subcommands against a mocked backend."""

    def test_login_persists_session(self, env, http, capsys):
        """Test login writes tokens and the active role to storage."""
        http.request.side_effect = [
            make_response(200, {"accessToken": "a", "refreshToken": "r", "user": user_payload(["Chairman"])}),
            make_response(200, 0),
        ]
        code = cli.main(["login", "--email", "user@example.com", "--password", "pw"])
        assert code == 0
        saved = json.loads((env / "state" / "rscmp-auth.json").read_text(encoding="utf-8"))
        assert saved == {"accessToken": "a", "refreshToken": "r", "selectedRole": "Chairman"}
        assert "Active role: Chairman (/chairman)" in capsys.readouterr().out

    def test_login_failure(self, env, http, capsys):
        """Test rejected credentials exit non-zero with a message."""
        http.request.return_value = make_response(401, {})
        assert cli.main(["login", "--email", "user@example.com", "--password", "bad"]) == 1
        assert "Invalid email or password" in capsys.readouterr().err

    def test_requires_login(self, env, http, capsys):
        """Test commands needing a session refuse without one."""
        assert cli.main(["submissions"]) == 1
        assert "Not logged in" in capsys.readouterr().err
        http.request.assert_not_called()

    def test_submissions(self, env, http, capsys):
        """Test the researcher's submissions are listed."""
        write_session(env)
        http.request.return_value = make_response(200, [research_payload(status="Draft")])
        assert cli.main(["--format", "github", "submissions"]) == 0
        out = capsys.readouterr().out
        assert "Found 1 submissions" in out
        assert "A study of conference workflows" in out

    def test_submit(self, env, http, capsys):
        """Test submitting a draft prints the refreshed detail."""
        write_session(env)
        http.request.side_effect = [
            make_response(200, research_payload(status="Draft")),
            make_response(200, research_payload(status="Submitted")),
            make_response(200, research_payload(status="Submitted")),
        ]
        assert cli.main(["submit", "r1"]) == 0
        assert "Available actions: none" in capsys.readouterr().out

    def test_notifications_mark_all(self, env, http, capsys):
        """Test marking everything read reports zero unread."""
        write_session(env)
        http.request.side_effect = [
            make_response(200, [{"id": "n1", "titleEn": "Hi", "isRead": False}]),
            make_response(200, 1),
            make_response(204),
        ]
        assert cli.main(["notifications", "--mark-all"]) == 0
        assert "Unread: 0" in capsys.readouterr().out

    def test_export_walks_pages(self, env, http, capsys):
        """Test export fetches every page into one CSV."""
        write_session(env, role="Admin")
        http.request.side_effect = [
            make_response(200, {"items": [research_payload("r1")], "pageNumber": 1, "totalPages": 2}),
            make_response(200, {"items": [research_payload("r2")], "pageNumber": 2, "totalPages": 2}),
        ]
        output = env / "all.csv"
        assert cli.main(["export-submissions", str(output)]) == 0
        lines = output.read_text(encoding="utf-8").strip().splitlines()
        assert len(lines) == 3
        assert http.request.call_count == 2

    def test_server_error_is_reported(self, env, http, capsys):
        """Test API failures exit non-zero with the generic message."""
        write_session(env)
        http.request.return_value = make_response(500, {})
        assert cli.main(["reviews"]) == 1
        assert "Server error" in capsys.readouterr().err

    def test_logout_clears_storage(self, env, http):
        """Test logout wipes the stored session."""
        write_session(env)
        http.request.return_value = make_response(204)
        assert cli.main(["logout"]) == 0
        saved = json.loads((env / "state" / "rscmp-auth.json").read_text(encoding="utf-8"))
        assert saved["accessToken"] is None
