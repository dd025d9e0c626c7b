"""CLI：vendor 同步命令"""

from __future__ import annotations

import logging

import click

from vendorsync.core.config import get_config
from vendorsync.core.exceptions import VendorError
from vendorsync.services.sync_service import SyncRequest, SyncService

CONFIG_HINT = (
    "To use vendored sources, add this to your .cargo/config.toml "
    "for this project:\n"
)


def register(group: click.Group) -> None:
    group.add_command(sync)


@click.command()
@click.argument("path", default=None, required=False)
@click.option(
    "--sync", "-s", "workspaces", multiple=True,
    help="要同步的解析结果文件或其所在目录（可多次指定）",
)
@click.option("--explicit-version", "-x", is_flag=True, help="目录名总是带版本号")
@click.option("--disallow-duplicates", is_flag=True, help="禁止同一个包存在多个版本")
@click.option("--no-delete", is_flag=True, help="不删除 vendor 目录中的旧包")
@click.option("--only-git", is_flag=True, help="只 vendor Git 来源的依赖")
@click.option("--relative-path", is_flag=True, help="生成的配置中使用相对路径")
@click.option(
    "--no-merge-sources", is_flag=True,
    help="每个来源使用独立的子目录，而不是合并到一个目录",
)
@click.option("--quiet", "-q", is_flag=True, help="不输出生成的配置")
def sync(
    path: str | None, workspaces: tuple[str, ...],
    explicit_version: bool, disallow_duplicates: bool, no_delete: bool,
    only_git: bool, relative_path: bool, no_merge_sources: bool, quiet: bool,
) -> None:
    """将全部依赖源码同步到 vendor 目录，并输出替换源配置"""
    if quiet:
        logging.getLogger().setLevel(logging.WARNING)

    req = SyncRequest(
        vendor_dir=path or get_config().vendor_dir,
        workspaces=list(workspaces),
        explicit_version=explicit_version,
        disallow_duplicates=disallow_duplicates,
        no_delete=no_delete,
        only_git=only_git,
        relative_path=relative_path,
        merge_sources=not no_merge_sources,
    )
    try:
        result = SyncService().execute(req)
    except VendorError as e:
        raise click.ClickException(f"failed to sync\n\nCaused by:\n  {e}") from e

    if not quiet:
        click.echo(CONFIG_HINT, err=True)
        click.echo(result.config_text, nl=False)
