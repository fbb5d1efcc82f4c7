"""Tests for the command-line interface."""

import json
import os
from pathlib import Path

import pytest

from prune.cli import main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("PRUNE_"):
            monkeypatch.delenv(key)


MESSAGES = json.dumps(
    [
        {"role": "system", "content": "SYSTEM: You are a helpful assistant."},
        {"role": "user", "content": "How do I read a file?"},
        {"role": "assistant", "content": "Use open() in a with block."},
    ]
)


def test_no_command(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1


def test_validate_config_defaults(capsys: pytest.CaptureFixture) -> None:
    main(["validate-config"])
    out = capsys.readouterr().out
    assert "Configuration is valid" in out
    assert "Max tokens: 800000" in out


def test_validate_config_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["validate-config", "--config", str(tmp_path / "missing.yaml")])
    assert exc.value.code == 1
    assert "Configuration error" in capsys.readouterr().err


def test_dry_run(capsys: pytest.CaptureFixture) -> None:
    main(["dry-run", "--messages", MESSAGES])
    out = capsys.readouterr().out
    assert "Messages in: 3" in out
    assert "Tokens in: " in out
    assert "Pruning runs: 0" in out
    assert "Total messages: 3" in out


def test_run_writes_output(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    messages_file = tmp_path / "messages.json"
    messages_file.write_text(MESSAGES)
    output = tmp_path / "out.json"

    main(["run", "--messages-file", str(messages_file), "--output", str(output)])

    data = json.loads(output.read_text())
    assert [m["role"] for m in data["messages"]] == ["system", "user", "assistant"]
    assert data["statistics"]["total_messages"] == 3
    assert "Pruning Result:" in capsys.readouterr().out


def test_run_with_small_budget(tmp_path: Path) -> None:
    output = tmp_path / "out.json"
    messages = json.dumps(
        [{"role": "assistant", "content": f"reply number {i}"} for i in range(50)]
    )

    main(["run", "--messages", messages, "--max-tokens", "60", "--output", str(output)])

    stats = json.loads(output.read_text())["statistics"]
    assert stats["total_tokens"] <= 60
    assert stats["max_tokens"] == 60


def test_zero_max_tokens_is_rejected(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["validate-config", "--max-tokens", "0"])
    assert exc.value.code == 1
    assert "max_tokens must be >= 1" in capsys.readouterr().err


def test_plain_string_messages_are_rejected(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["dry-run", "--messages", json.dumps(["hello"])])
    assert exc.value.code == 1
    assert "Cannot read a message" in capsys.readouterr().err


def test_invalid_json(capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["dry-run", "--messages", "not json"])
    assert exc.value.code == 1
    assert "Invalid JSON" in capsys.readouterr().err


def test_create_config(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    path = tmp_path / "prune.yaml"
    main(["create-config", "--output", str(path)])
    assert path.exists()
    assert "Example config created" in capsys.readouterr().out
