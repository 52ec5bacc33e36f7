"""maildirkit の例外。

- not-found: 作成指定なしでフォルダが存在しない
- io-failure: OS レベルの失敗（原因は ``__cause__`` に残る）
- encoding-impossible: フォルダ名を UTF-16 に変換できない
"""

from __future__ import annotations


class MaildirError(Exception):
    """Base class for every error raised by maildirkit."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class MaildirNotFoundError(MaildirError):
    pass


class MaildirIOError(MaildirError):
    pass


class MaildirEncodingError(MaildirError, ValueError):
    pass
