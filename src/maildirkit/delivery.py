"""Atomic message delivery into a Maildir folder.

Sequence (one call = one message):

1. take the next process-wide counter value
2. build ``<sec>.M<usec>P<pid>_<counter>.<host>``
3. write the content to ``tmp/<name>`` and fsync it
4. rename it to ``new/<name>,S=<size>``
5. chown the published file when an owner is configured

Readers listing ``new/`` see either nothing or the complete file. Nothing is
left in ``tmp/`` when a step fails. A failed chown removes the published file
as well, so a message never stays around with the wrong owner.
"""

from __future__ import annotations

import functools
import io
import logging
import os
import socket
import time
from typing import TYPE_CHECKING, BinaryIO, Union

from maildirkit.counter import next_counter
from maildirkit.errors import MaildirIOError
from maildirkit.owner import change_owner

if TYPE_CHECKING:
    from maildirkit.maildir import Maildir

log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
SIZE_MARKER = ",S="

MessageSource = Union[BinaryIO, bytes, bytearray, memoryview]


@functools.lru_cache(maxsize=None)
def hostname() -> str:
    """Host part of message names; resolved once per process.

    ``/`` and ``:`` would break the file name, so they are written as octal
    escapes the way other Maildir writers do.
    """
    return socket.gethostname().replace("/", "\\057").replace(":", "\\072")


def make_unique_name(
    *,
    now_ns: int | None = None,
    pid: int | None = None,
    counter: int | None = None,
    host: str | None = None,
) -> str:
    if counter is None:
        counter = next_counter()
    if now_ns is None:
        now_ns = time.time_ns()
    if pid is None:
        pid = os.getpid()
    if host is None:
        host = hostname()
    seconds, rest = divmod(now_ns, 1_000_000_000)
    return f"{seconds}.M{rest // 1000}P{pid}_{counter}.{host}"


def deliver(maildir: Maildir, data: MessageSource) -> str:
    """Deliver ``data`` into ``maildir``'s ``new/`` area.

    ``data`` is a binary file-like object (anything with ``read(n)``) or a
    bytes-like object. The size suffix is the number of bytes actually read.

    Returns:
        Full path of the published message.

    Raises:
        MaildirIOError: any filesystem failure; the original ``OSError`` is
            the ``__cause__``.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        data = io.BytesIO(data)

    basename = make_unique_name()
    tmp_path = os.path.join(maildir.tmp_dir, basename)

    try:
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, maildir.perm)
    except OSError as e:
        raise MaildirIOError(f"cannot create {tmp_path}: {e}", path=tmp_path) from e

    try:
        with open(fd, "wb") as f:
            size = _copy(data, f)
            f.flush()
            os.fsync(f.fileno())
    except (OSError, TypeError) as e:
        _discard(tmp_path)
        raise MaildirIOError(f"cannot write {tmp_path}: {e}", path=tmp_path) from e
    except BaseException:
        _discard(tmp_path)
        raise

    new_path = os.path.join(maildir.new_dir, f"{basename}{SIZE_MARKER}{size}")
    try:
        os.rename(tmp_path, new_path)
    except OSError as e:
        _discard(tmp_path)
        raise MaildirIOError(f"cannot publish {tmp_path}: {e}", path=tmp_path) from e

    try:
        change_owner(new_path, maildir.owner)
    except OSError as e:
        _discard(new_path)
        raise MaildirIOError(
            f"cannot change owner of {new_path} (message removed): {e}",
            path=new_path,
        ) from e

    log.debug("delivered %s (%d bytes)", new_path, size)
    return new_path


def _copy(src: BinaryIO, dst: BinaryIO) -> int:
    size = 0
    while True:
        chunk = src.read(CHUNK_SIZE)
        if not chunk:
            return size
        if not isinstance(chunk, (bytes, bytearray)):
            raise TypeError(f"message source must be binary, got {type(chunk).__name__}")
        dst.write(chunk)
        size += len(chunk)


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        log.warning("cleanup failed: could not remove %s", path, exc_info=True)
