"""maildirkit の設定ファイル(maildirkit.toml)のロード。

読み込み優先順位:
1. 環境変数 MAILDIRKIT_ROOT / MAILDIRKIT_LOG_LEVEL
2. TOML (`maildirkit.toml`)
3. デフォルト

```toml
[maildir]
root = "~/Maildir"
create = true
perm = "0600"            # 8進数の文字列のみ
uid = -1
gid = -1

[logging]
level = "INFO"
file = "~/.maildirkit/logs/maildirkit.log"
```
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib  # type: ignore[no-redef]

from maildirkit.maildir import DEFAULT_FILE_PERM
from maildirkit.owner import DO_NOT_SET_OWNER, Owner

DEFAULT_CONFIG_PATH = Path("maildirkit.toml")


@dataclass
class MaildirSection:
    root: Path = field(default_factory=lambda: Path("~/Maildir").expanduser())
    create: bool = True
    perm: int = DEFAULT_FILE_PERM
    uid: int = DO_NOT_SET_OWNER
    gid: int = DO_NOT_SET_OWNER


@dataclass
class LoggingSection:
    level: str = "INFO"
    file: Path = field(
        default_factory=lambda: Path("~/.maildirkit/logs/maildirkit.log").expanduser()
    )


@dataclass
class MaildirkitConfig:
    maildir: MaildirSection = field(default_factory=MaildirSection)
    logging: LoggingSection = field(default_factory=LoggingSection)

    def owner(self) -> Owner | None:
        o = Owner(uid=self.maildir.uid, gid=self.maildir.gid)
        return o if o.enabled else None


def parse_perm(value: str | int) -> int:
    """`"0644"` / `"644"` / `"0o644"` / `0o644` -> 0o644

    Only rwx bits (0o777) are accepted.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid permission: {value!r}")
    if isinstance(value, int):
        perm = value
    else:
        s = str(value).strip().lower()
        if s.startswith("0o"):
            s = s[2:]
        try:
            perm = int(s, 8)
        except ValueError:
            raise ValueError(f"invalid permission: {value!r}") from None
    if not 0 <= perm <= 0o777:
        raise ValueError(f"invalid permission: {value!r}")
    return perm


def _toml_perm(value: object) -> int:
    # TOML の `perm = 644` は10進数になるので、文字列だけ受け付ける
    if not isinstance(value, str):
        raise ValueError(f'[maildir].perm must be an octal string such as "0600", got {value!r}')
    return parse_perm(value)


def _toml_bool(key: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def load_config(path: Path | None = None) -> MaildirkitConfig:
    """設定ファイルを読み込む。なければデフォルト。"""
    if path is None:
        path = DEFAULT_CONFIG_PATH

    raw: dict = {}
    if path.exists():
        raw = tomllib.loads(path.read_text(encoding="utf-8"))

    md = raw.get("maildir", {}) or {}
    lg = raw.get("logging", {}) or {}
    defaults = MaildirkitConfig()

    cfg = MaildirkitConfig(
        maildir=MaildirSection(
            root=Path(str(md["root"])).expanduser() if "root" in md else defaults.maildir.root,
            create=_toml_bool("[maildir].create", md.get("create", True)),
            perm=_toml_perm(md["perm"]) if "perm" in md else DEFAULT_FILE_PERM,
            uid=int(md.get("uid", DO_NOT_SET_OWNER)),
            gid=int(md.get("gid", DO_NOT_SET_OWNER)),
        ),
        logging=LoggingSection(
            level=str(lg.get("level", "INFO")),
            file=Path(str(lg["file"])).expanduser() if "file" in lg else defaults.logging.file,
        ),
    )

    env_root = os.environ.get("MAILDIRKIT_ROOT", "")
    if env_root:
        cfg.maildir.root = Path(env_root).expanduser()
    env_level = os.environ.get("MAILDIRKIT_LOG_LEVEL", "")
    if env_level:
        cfg.logging.level = env_level

    return cfg
