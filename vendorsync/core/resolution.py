"""解析结果文件加载

外部解析器把一个工作区的完整依赖闭包写成 YAML / JSON 文档，
由本模块加载为 PackageIdentity / ResolvedPackage，作为默认的 PackageProvider。

文档格式:
    packages:
      - name: bitflags
        version: 0.8.0
        source: registry+https://github.com/rust-lang/crates.io-index
        path: ~/.cargo/registry/src/index/bitflags-0.8.0
        checksum: 9a0f...          # 可选，仅注册表 tarball 有
        files: [Cargo.toml, src/lib.rs]  # 可选，权威文件列表
      - name: bar
        version: 0.1.0
        source: path+file:///work/foo/bar

相对路径以文档所在目录为基准。
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from vendorsync.core.exceptions import FetchError, OriginError
from vendorsync.core.models import (
    PackageIdentity,
    PathOrigin,
    ResolvedPackage,
    parse_origin,
)
from vendorsync.utils.file_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION_FILE = "vendor.lock.yml"


class ResolutionFileProvider:
    """基于解析结果文件的 PackageProvider 实现"""

    def __init__(
        self,
        default_name: str = DEFAULT_RESOLUTION_FILE,
        base_dir: Path | None = None,
    ) -> None:
        self.default_name = default_name
        self.base_dir = base_dir or Path.cwd()
        self._packages: dict[PackageIdentity, ResolvedPackage] = {}

    def locate(self, workspace: str) -> Path:
        """工作区参数可以是文件，也可以是包含默认文件名的目录"""
        path = self.base_dir / workspace
        if path.is_dir():
            path = path / self.default_name
        return path

    def resolve(self, workspace: str) -> list[PackageIdentity]:
        path = self.locate(workspace)
        if not path.is_file():
            raise FetchError(f"解析结果文件不存在: {path}")
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, ValueError, OSError) as e:
            raise FetchError(f"无法加载解析结果文件 {path}: {e}") from e

        entries = data.get("packages") or []
        if not isinstance(entries, list):
            raise FetchError(f"{path}: packages 必须是列表")

        base = path.parent.resolve()
        identities: list[PackageIdentity] = []
        for index, raw in enumerate(entries):
            if not isinstance(raw, dict):
                raise FetchError(f"{path}: 第 {index + 1} 个包条目不是对象")
            pkg = self._load_entry(raw, base, path)
            self._packages[pkg.identity] = pkg
            identities.append(pkg.identity)

        logger.debug("已加载 %d 个包: %s", len(identities), path)
        return identities

    def fetch(self, identity: PackageIdentity) -> ResolvedPackage:
        pkg = self._packages.get(identity)
        if pkg is None:
            raise FetchError(f"包未出现在任何解析结果中: {identity}")
        if not pkg.root.is_dir():
            raise FetchError(f"包源码目录不存在: {identity} -> {pkg.root}")
        return pkg

    @staticmethod
    def _load_entry(raw: dict, base: Path, source_file: Path) -> ResolvedPackage:
        name = raw.get("name")
        version = raw.get("version")
        source = raw.get("source")
        if not name or not version or not source:
            raise FetchError(
                f"{source_file}: 包条目缺少 name / version / source: {raw}"
            )

        try:
            origin = parse_origin(str(source))
        except OriginError as e:
            raise FetchError(f"{source_file}: {name} {version}: {e}") from e

        if isinstance(origin, PathOrigin) and not origin.path.is_absolute():
            origin = PathOrigin(path=(base / origin.path).resolve())

        if raw.get("path"):
            root = Path(str(raw["path"])).expanduser()
            if not root.is_absolute():
                root = base / root
        elif isinstance(origin, PathOrigin):
            root = origin.path
        else:
            raise FetchError(f"{source_file}: 包 {name} {version} 缺少 path")

        files = raw.get("files")
        if files is not None and not isinstance(files, list):
            raise FetchError(f"{source_file}: 包 {name} {version} 的 files 必须是列表")

        identity = PackageIdentity(name=str(name), version=str(version), origin=origin)
        return ResolvedPackage(
            identity=identity,
            root=root,
            files=tuple(str(f) for f in files) if files is not None else None,
            checksum=str(raw["checksum"]) if raw.get("checksum") else None,
        )
