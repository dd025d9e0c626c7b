"""vendorsync 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

import os

import click

from vendorsync import __version__
from vendorsync.core.config import DEFAULT_CONFIG_PATH, init_config
from vendorsync.core.exceptions import ConfigError
from vendorsync.utils.logger import setup_logging, verbosity_to_level


@click.group()
@click.version_option(version=__version__, prog_name="vendorsync")
@click.option(
    "--config", "config_path",
    default=lambda: os.getenv("VENDORSYNC_CONFIG", DEFAULT_CONFIG_PATH),
    help="配置文件路径",
)
@click.option("--verbose", "-v", count=True, help="输出调试日志")
def main(config_path: str, verbose: int) -> None:
    """vendorsync - 将全部外部依赖源码同步到本地 vendor 目录"""
    level = os.getenv("VENDORSYNC_LOG_LEVEL") or verbosity_to_level(verbose, quiet=False)
    setup_logging(
        level=level,
        json_output=os.getenv("VENDORSYNC_LOG_JSON", "") == "1",
    )
    try:
        init_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


# 注册各领域子命令
from vendorsync.cli.cmd_sync import register as _reg_sync  # noqa: E402
from vendorsync.cli.cmd_verify import register as _reg_verify  # noqa: E402

_reg_sync(main)
_reg_verify(main)
