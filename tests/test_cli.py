"""Tests for the slack-reword command line."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from slack_reword import cli
from slack_reword.errors import TransformError
from tests.conftest import TEST_SECRET, make_signature


class TestBuildParser:
    def test_serve_defaults(self):
        args = cli.build_parser().parse_args(["serve"])
        assert args.command == "serve"
        assert isinstance(args.port, int)
        assert args.func is cli._cmd_serve

    def test_serve_options(self):
        args = cli.build_parser().parse_args(["serve", "--host", "127.0.0.1", "--port", "8080"])
        assert args.host == "127.0.0.1"
        assert args.port == 8080

    def test_reword_arguments(self):
        args = cli.build_parser().parse_args(["-v", "reword", "do it", "--model", "m"])
        assert args.verbose is True
        assert args.message == "do it"
        assert args.model == "m"

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestSignCommand:
    def test_prints_signature_headers(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["sign", "--body", "text=hi", "--timestamp", "1700000000", "--secret", TEST_SECRET])

        assert exc_info.value.code == 0
        out = capsys.readouterr().out.splitlines()
        assert out == [
            "X-Slack-Request-Timestamp: 1700000000",
            "X-Slack-Signature: " + make_signature(TEST_SECRET, "1700000000", b"text=hi"),
        ]

    def test_missing_secret_exits_1(self, monkeypatch, capsys):
        monkeypatch.delenv("SLACK_SIGNING_SECRET", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["sign", "--body", "text=hi"])
        assert exc_info.value.code == 1
        assert "No signing secret" in capsys.readouterr().err


class TestRewordCommand:
    def test_prints_result(self, capsys):
        async def fake_reword(message, model):
            return "friendly: " + message

        with patch.object(cli, "_reword", fake_reword):
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["reword", "fix it"])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert captured.out.strip() == "friendly: fix it"
        assert "Rewording" in captured.err

    def test_error_exits_1(self, capsys):
        async def failing_reword(message, model):
            raise TransformError("overloaded", status_code=529)

        with patch.object(cli, "_reword", failing_reword):
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["reword", "fix it"])

        assert exc_info.value.code == 1
        assert "Error: Transform API error 529" in capsys.readouterr().err

    def test_empty_message_exits_1(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["reword", "   "])
        assert exc_info.value.code == 1
