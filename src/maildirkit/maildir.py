"""Maildir folder handle.

Directory layout::

    <root>/                  inbox (root path always ends with a separator)
    <root>/{tmp,new,cur}/
    <root>/.Sent/            child folder "Sent"
    <root>/.Sent.2024/       child "2024" of "Sent"

Child folders are flat directories next to the inbox's lifecycle
directories; the hierarchy lives in the ``.``-joined encoded names.

A ``Maildir`` is a plain value: it holds no open files and caches nothing.
Every open/child call looks at the filesystem again.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from maildirkit import delivery
from maildirkit.errors import MaildirIOError, MaildirNotFoundError
from maildirkit.names import SEGMENT_SEPARATOR, encode_name
from maildirkit.owner import Owner, change_owner

log = logging.getLogger(__name__)

DEFAULT_FILE_PERM = 0o600

TMP = "tmp"
NEW = "new"
CUR = "cur"
SUBDIRS = (TMP, CUR, NEW)


def dir_perm_for(perm: int) -> int:
    """Directory mode for a file mode: add ``x`` wherever ``r`` is set."""
    return perm | ((perm & 0o444) >> 2)


def normalize_path(path: str | os.PathLike[str]) -> str:
    p = os.fspath(path)
    if not p:
        return "." + os.sep
    if p[-1] == os.sep or (os.altsep and p[-1] == os.altsep):
        return p
    return p + os.sep


@dataclass(frozen=True)
class Maildir:
    path: str
    perm: int = DEFAULT_FILE_PERM
    owner: Owner | None = None

    @classmethod
    def open(
        cls,
        path: str | os.PathLike[str],
        create: bool = False,
        *,
        perm: int = DEFAULT_FILE_PERM,
        owner: Owner | None = None,
    ) -> Maildir:
        """Open the mailbox at ``path``; with ``create``, make whatever is missing.

        ``perm`` is the mode of delivered files. Directories get the same mode
        plus ``x`` for every ``r``.

        Raises:
            MaildirNotFoundError: the mailbox (or one of tmp/new/cur) is
                missing and ``create`` is false.
            MaildirIOError: any other filesystem failure.
        """
        return cls._open(normalize_path(path), create, perm, owner)

    @classmethod
    def _open(cls, path: str, create: bool, perm: int, owner: Owner | None) -> Maildir:
        dir_perm = dir_perm_for(perm)
        try:
            os.stat(path)
        except FileNotFoundError:
            if not create:
                raise MaildirNotFoundError(f"no such maildir: {path}", path=path) from None
            _make_root(path, dir_perm, owner)
        except OSError as e:
            raise MaildirIOError(f"cannot stat {path}: {e}", path=path) from e

        if create:
            _ensure_subdirs(path, dir_perm, owner)
        else:
            _check_subdirs(path)
        return cls(path=path, perm=perm, owner=owner)

    def child(self, name: str, create: bool = False) -> Maildir:
        """Open the sub-folder ``name``; the name is encoded, never split.

        An empty name would map to ``<parent>.``, i.e. the parent itself.
        """
        if not name:
            raise ValueError("folder name must not be empty")
        path = self.path + SEGMENT_SEPARATOR + encode_name(name)
        return self._open(path, create, self.perm, self.owner)

    def folder(self, *names: str, create: bool = False) -> Maildir:
        """Walk down ``names`` one child at a time."""
        md = self
        for name in names:
            md = md.child(name, create=create)
        return md

    def deliver(self, data: delivery.MessageSource) -> str:
        """Deliver a message into ``new/`` and return its full path."""
        return delivery.deliver(self, data)

    @property
    def dir_perm(self) -> int:
        return dir_perm_for(self.perm)

    @property
    def tmp_dir(self) -> Path:
        return Path(self.path, TMP)

    @property
    def new_dir(self) -> Path:
        return Path(self.path, NEW)

    @property
    def cur_dir(self) -> Path:
        return Path(self.path, CUR)


def _make_root(path: str, dir_perm: int, owner: Owner | None) -> None:
    try:
        os.makedirs(path, dir_perm, exist_ok=True)
        change_owner(path, owner)
    except OSError as e:
        raise MaildirIOError(f"cannot create {path}: {e}", path=path) from e
    log.info("created maildir %s", path)


def _ensure_subdirs(path: str, dir_perm: int, owner: Owner | None) -> None:
    for sub in SUBDIRS:
        p = os.path.join(path, sub)
        try:
            os.mkdir(p, dir_perm)
        except FileExistsError:
            if not os.path.isdir(p):
                raise MaildirIOError(f"not a directory: {p}", path=p) from None
            continue
        except OSError as e:
            raise MaildirIOError(f"cannot create {p}: {e}", path=p) from e
        try:
            change_owner(p, owner)
        except OSError as e:
            raise MaildirIOError(f"cannot change owner of {p}: {e}", path=p) from e


def _check_subdirs(path: str) -> None:
    for sub in SUBDIRS:
        p = os.path.join(path, sub)
        if not os.path.isdir(p):
            raise MaildirNotFoundError(f"not a maildir (missing {sub}/): {path}", path=path)
