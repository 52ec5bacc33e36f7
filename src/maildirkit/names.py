"""Folder name encoding for Maildir++ style folder hierarchies.

A folder named ``Work/Clients`` under the inbox lives in the directory
``<inbox>/.Work&AC8-Clients``: every character that is not printable ASCII,
plus the structural characters ``.``, ``/`` and ``&``, is escaped.

Escapes follow the modified UTF-7 convention used for IMAP mailbox names:

- ``&`` becomes ``&-``
- any other run of unsafe characters becomes ``&`` + base64 of its
  UTF-16BE encoding (alphabet ``A-Za-z0-9+,``, no ``=`` padding) + ``-``

Only encoding is provided. Encoded names are not meant to be encoded again:
the ``&`` opening an escape would itself be escaped.
"""

from __future__ import annotations

import base64
import re

from maildirkit.errors import MaildirEncodingError

ESCAPE_MARK = "&"
SEGMENT_SEPARATOR = "."
PATH_SEPARATOR = "/"

_STRUCTURAL = frozenset((ESCAPE_MARK, SEGMENT_SEPARATOR, PATH_SEPARATOR))

# "&" alone, or a maximal run of unsafe characters other than "&".
# 0x26 ("&"), 0x2E (".") and 0x2F ("/") sit outside the safe ranges.
_ESCAPE_RUN = re.compile(r"&|[^&\x20-\x25\x27-\x2D\x30-\x7E]+")


def is_safe_char(ch: str) -> bool:
    """True if ``ch`` can appear verbatim in an encoded folder name.

    DEL (0x7F) is a control character and therefore unsafe.
    """
    return 0x20 <= ord(ch) <= 0x7E and ch not in _STRUCTURAL


def encode_name(name: str) -> str:
    """Encode a folder name into a single filesystem-safe path segment."""
    return _ESCAPE_RUN.sub(_escape, name)


def _escape(m: re.Match[str]) -> str:
    run = m.group()
    if run == ESCAPE_MARK:
        return "&-"
    return _encode_sequence(run)


def _encode_sequence(run: str) -> str:
    try:
        raw = run.encode("utf-16-be")
    except UnicodeEncodeError as e:
        raise MaildirEncodingError(f"cannot encode folder name characters {run!r}") from e
    b64 = base64.b64encode(raw, altchars=b"+,").rstrip(b"=").decode("ascii")
    return f"&{b64}-"
