"""CLI：vendor 目录校验命令"""

from __future__ import annotations

from pathlib import Path

import click

from vendorsync.core.config import get_config
from vendorsync.core.exceptions import VendorError
from vendorsync.services.verify_service import verify_vendor


def register(group: click.Group) -> None:
    group.add_command(verify)


@click.command()
@click.argument("path", default=None, required=False)
def verify(path: str | None) -> None:
    """按校验和清单核对 vendor 目录中的文件"""
    cfg = get_config()
    vendor_dir = Path(path or cfg.vendor_dir)
    if not vendor_dir.is_dir():
        raise click.ClickException(f"vendor 目录不存在: {vendor_dir}")

    try:
        report = verify_vendor(vendor_dir, cfg.checksum_filename, cfg.sources_file)
    except VendorError as e:
        raise click.ClickException(str(e)) from e

    for p in report.problems:
        click.echo(f"  [{p.kind:8s}] {p.entry.name}/{p.rel_path}")
    if not report.ok:
        raise click.ClickException(
            f"{len(report.problems)} 处文件与校验和清单不一致（共校验 {report.checked} 个包）"
        )
    click.echo(f"校验通过: {report.checked} 个包")
