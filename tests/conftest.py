from __future__ import annotations

import os
from pathlib import Path

import pytest

from maildirkit.maildir import Maildir


@pytest.fixture(autouse=True)
def fixed_umask():
    """権限のテストが実行環境の umask に左右されないようにする。"""
    old = os.umask(0o022)
    yield
    os.umask(old)


@pytest.fixture()
def maildir_root(tmp_path: Path) -> Path:
    return tmp_path / "Maildir"


@pytest.fixture()
def inbox(maildir_root: Path) -> Maildir:
    return Maildir.open(maildir_root, create=True)


