"""logging_setup のテスト。"""

import logging
from pathlib import Path

from maildirkit.logging_setup import setup_logging


def test_setup_logging_writes_file_once(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(setup_logging, "_configured", False, raising=False)
    root_logger = logging.getLogger()
    before = list(root_logger.handlers)
    old_level = root_logger.level

    log_path = tmp_path / "logs" / "maildirkit.log"
    try:
        setup_logging(log_path=log_path, level="debug")
        setup_logging(log_path=tmp_path / "other.log", level="debug")

        added = [h for h in root_logger.handlers if h not in before]
        assert len(added) == 1
        assert root_logger.level == logging.DEBUG

        logging.getLogger("maildirkit.test").info("hello log")
        added[0].flush()
        assert "maildirkit.test: hello log" in log_path.read_text(encoding="utf-8")
        assert not (tmp_path / "other.log").exists()
    finally:
        for h in root_logger.handlers[:]:
            if h not in before:
                root_logger.removeHandler(h)
                h.close()
        root_logger.setLevel(old_level)
