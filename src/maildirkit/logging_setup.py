"""logging の初期化。

- 詳細ログ: 既定は `~/.maildirkit/logs/maildirkit.log`（設定 [logging].file）
- ライブラリ側は `logging.getLogger(__name__)` に書くだけで、ハンドラは持たない
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logging(*, log_path: Path, level: str = "INFO") -> None:
    # CLI コールバックは呼び出しごとに走る。ハンドラはプロセスで1つだけ
    if getattr(setup_logging, "_configured", False):
        return

    log_path.parent.mkdir(parents=True, exist_ok=True)
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = RotatingFileHandler(
        log_path,
        maxBytes=2_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(fmt)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(handler)

    setup_logging._configured = True  # type: ignore[attr-defined]
