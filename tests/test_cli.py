"""CLI のテスト。"""

import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from maildirkit.cli import app
from maildirkit.logging_setup import setup_logging

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_logging(monkeypatch):
    """各テストのログハンドラをそのテストの tmp_path に閉じ込める。"""
    monkeypatch.setattr(setup_logging, "_configured", False, raising=False)
    root_logger = logging.getLogger()
    before = list(root_logger.handlers)
    old_level = root_logger.level
    yield
    for h in root_logger.handlers[:]:
        if h not in before:
            root_logger.removeHandler(h)
            h.close()
    root_logger.setLevel(old_level)


@pytest.fixture()
def config_path(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.delenv("MAILDIRKIT_ROOT", raising=False)
    monkeypatch.delenv("MAILDIRKIT_LOG_LEVEL", raising=False)
    p = tmp_path / "maildirkit.toml"
    p.write_text(
        f"""
[maildir]
root = "{(tmp_path / 'Maildir').as_posix()}"

[logging]
file = "{(tmp_path / 'logs' / 'maildirkit.log').as_posix()}"
""",
        encoding="utf-8",
    )
    return p


def test_encode(config_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(config_path), "encode", "A./B"])
    assert result.exit_code == 0
    assert result.output.strip() == "A&AC4ALw-B"


def test_init_uses_configured_root(config_path: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(config_path), "init", "--perm", "0644"])
    assert result.exit_code == 0, result.output
    for sub in ["tmp", "new", "cur"]:
        assert (tmp_path / "Maildir" / sub).is_dir()


def test_init_rejects_bad_perm(config_path: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(config_path), "init", "--perm", "rwx"])
    assert result.exit_code != 0
    assert not (tmp_path / "Maildir").exists()


def test_folder_prints_nested_path(config_path: Path, tmp_path: Path) -> None:
    root = tmp_path / "box"
    result = runner.invoke(
        app, ["--config", str(config_path), "folder", "--root", str(root), "foo", "bar"]
    )
    assert result.exit_code == 0, result.output
    expected = str(root) + "/.foo.bar"
    assert result.output.strip() == expected
    assert Path(expected, "new").is_dir()


def test_folder_no_create_missing(config_path: Path, tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["--config", str(config_path), "folder", "--no-create", "--root", str(tmp_path / "x"), "a"],
    )
    assert result.exit_code == 1
    assert "no such maildir" in result.output


def test_deliver_from_stdin(config_path: Path, tmp_path: Path) -> None:
    data = b"Subject: hi\n\nbody\n"
    result = runner.invoke(
        app,
        ["--config", str(config_path), "deliver", "--folder", "Sent"],
        input=data,
    )
    assert result.exit_code == 0, result.output
    published = Path(result.output.strip())
    assert published.parent == tmp_path / "Maildir" / ".Sent" / "new"
    assert published.name.endswith(f",S={len(data)}")
    assert published.read_bytes() == data


def test_deliver_from_file(config_path: Path, tmp_path: Path) -> None:
    msg = tmp_path / "message.eml"
    msg.write_bytes(b"From: a@example.invalid\n\nx\n")
    result = runner.invoke(
        app,
        ["--config", str(config_path), "deliver", "--file", str(msg)],
    )
    assert result.exit_code == 0, result.output
    published = Path(result.output.strip())
    assert published.parent == tmp_path / "Maildir" / "new"
    assert published.read_bytes() == msg.read_bytes()


def test_deliver_missing_file(config_path: Path, tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["--config", str(config_path), "deliver", "--file", str(tmp_path / "nope.eml")],
    )
    assert result.exit_code == 1


def test_log_file_follows_config(config_path: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(config_path), "init"])
    assert result.exit_code == 0, result.output
    log_path = tmp_path / "logs" / "maildirkit.log"
    assert "created maildir" in log_path.read_text(encoding="utf-8")


def test_folder_rejects_empty_name(config_path: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(config_path), "folder", "Sent", ""])
    assert result.exit_code == 1
    assert "must not be empty" in result.output
