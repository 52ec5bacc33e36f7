"""maildirkit CLI エントリポイント。"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from maildirkit.config import MaildirkitConfig, load_config, parse_perm
from maildirkit.errors import MaildirError
from maildirkit.logging_setup import setup_logging
from maildirkit.maildir import Maildir
from maildirkit.names import encode_name

APP_HELP = "📬 maildirkit: Maildir フォルダ作成とメッセージ配送"

app = typer.Typer(add_completion=False, help=APP_HELP)
console = Console(stderr=True)


def _fail(e: Exception) -> typer.Exit:
    console.print(f"❌ {e}", style="red", markup=False, soft_wrap=True)
    return typer.Exit(code=1)


def _open_root(cfg: MaildirkitConfig, root: Path | None, create: bool) -> Maildir:
    return Maildir.open(
        root or cfg.maildir.root,
        create,
        perm=cfg.maildir.perm,
        owner=cfg.owner(),
    )


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", help="設定ファイル (既定: ./maildirkit.toml)"
    ),
) -> None:
    """設定とログを読み込む。"""
    try:
        cfg = load_config(config)
    except ValueError as e:
        raise _fail(e) from e
    setup_logging(log_path=cfg.logging.file, level=cfg.logging.level)
    ctx.obj = cfg


@app.command()
def init(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="作成する Maildir (既定: 設定の root)"),
    perm: str | None = typer.Option(None, "--perm", help="メッセージファイルの権限 (例: 0600)"),
) -> None:
    """Maildir (tmp/ new/ cur/) を作成する。"""
    cfg: MaildirkitConfig = ctx.obj
    try:
        file_perm = parse_perm(perm) if perm else cfg.maildir.perm
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--perm") from e

    try:
        md = Maildir.open(path or cfg.maildir.root, True, perm=file_perm, owner=cfg.owner())
    except MaildirError as e:
        raise _fail(e) from e
    console.print(f"✅ Maildir ready: {md.path}", style="green", markup=False, soft_wrap=True)


@app.command()
def folder(
    ctx: typer.Context,
    names: list[str] = typer.Argument(..., help="フォルダ名（親→子の順）"),
    root: Path | None = typer.Option(None, "--root", help="Maildir ルート"),
    create: bool = typer.Option(True, "--create/--no-create", help="なければ作成する"),
) -> None:
    """サブフォルダを開く（作成する）してパスを表示する。"""
    cfg: MaildirkitConfig = ctx.obj
    try:
        md = _open_root(cfg, root, create).folder(*names, create=create)
    except (MaildirError, ValueError) as e:
        raise _fail(e) from e
    typer.echo(md.path)


@app.command()
def deliver(
    ctx: typer.Context,
    root: Path | None = typer.Option(None, "--root", help="Maildir ルート"),
    folders: list[str] | None = typer.Option(None, "--folder", help="配送先フォルダ（繰り返し指定で階層）"),
    file: Path | None = typer.Option(None, "--file", help="メッセージファイル（省略時は stdin）"),
) -> None:
    """メッセージを new/ に配送して、配送先パスを表示する。"""
    cfg: MaildirkitConfig = ctx.obj
    create = cfg.maildir.create
    try:
        md = _open_root(cfg, root, create).folder(*(folders or []), create=create)
        if file is not None:
            with file.open("rb") as f:
                published = md.deliver(f)
        else:
            published = md.deliver(typer.get_binary_stream("stdin"))
    except (MaildirError, OSError, ValueError) as e:
        raise _fail(e) from e
    typer.echo(published)


@app.command()
def encode(
    name: str = typer.Argument(..., help="フォルダ名"),
) -> None:
    """フォルダ名をディレクトリ名用にエンコードして表示する。"""
    try:
        typer.echo(encode_name(name))
    except MaildirError as e:
        raise _fail(e) from e
