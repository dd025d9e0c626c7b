"""集中配置管理

vendor 目录布局相关的文件名、默认注册表、过滤规则统一在此定义，
支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field

from vendorsync.core.exceptions import ConfigError
from vendorsync.utils.file_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/vendorsync.yml"
DEFAULT_REGISTRY_URL = "https://github.com/rust-lang/crates.io-index"


@dataclass
class Config:
    """vendorsync 全局配置"""

    # 目录与文件名
    vendor_dir: str = "vendor"
    resolution_file: str = "vendor.lock.yml"
    checksum_file: str = "cargo-checksum.json"  # 落盘为 .<checksum_file>
    manifest_file: str = "Cargo.toml"
    ready_marker: str = ".cargo-ok"
    sources_file: str = ".sources"

    # 生成的替换配置
    default_registry_url: str = DEFAULT_REGISTRY_URL
    default_registry_name: str = "crates-io"
    vendored_sources_name: str = "vendored-sources"

    # 文件过滤（追加到内置规则之上）
    exclude_names: list[str] = field(default_factory=list)
    exclude_suffixes: list[str] = field(default_factory=list)

    extra: dict = field(default_factory=dict)

    @property
    def checksum_filename(self) -> str:
        return f".{self.checksum_file}"

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_PATH) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known and k != "extra"}
        extra = {k: v for k, v in data.items() if k not in known}
        for key in ("exclude_names", "exclude_suffixes"):
            if key in matched and not isinstance(matched[key], list):
                raise ConfigError(f"配置项 {key} 必须是列表: {path}")
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.debug("配置已加载: %s", path)
    return _current


def reset_config() -> None:
    global _current  # noqa: PLW0603
    _current = None
