"""同步器

逐个处理 vendor 条目：决定复制还是跳过，复制选中的文件并写出校验和清单。

跳过规则:
  - 带版本后缀的目录一旦写成即视为不可变，已有校验和清单时直接跳过
  - 不带后缀的主版本目录每次都重新复制，主版本可能在两次运行间变化
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from vendorsync.core.exceptions import ResourceError
from vendorsync.core.models import (
    ChecksumManifest,
    CollectedPackages,
    LayoutPlan,
    PackageIdentity,
    VendorEntry,
    VersionPlan,
)
from vendorsync.core.selector import PathFilter, copy_selected, select_files
from vendorsync.utils.file_io import load_json, save_json

logger = logging.getLogger(__name__)

DEFAULT_CHECKSUM_FILENAME = ".cargo-checksum.json"


@dataclass
class CopyReport:
    """一次同步的复制结果"""

    copied: list[VendorEntry] = field(default_factory=list)
    skipped: list[VendorEntry] = field(default_factory=list)
    touched: set[Path] = field(default_factory=set)


def build_entries(
    collected: CollectedPackages,
    identities: Iterable[PackageIdentity],
    versions: VersionPlan,
    layout: LayoutPlan,
) -> list[VendorEntry]:
    """组合版本规划与布局规划，得到每个包的目标位置"""
    entries = []
    for identity in identities:
        name = versions.dest_name(identity)
        entries.append(VendorEntry(
            package=collected.packages[identity],
            dest_name=name,
            dest=layout.root_for(identity.origin) / name,
            suffixed=versions.needs_suffix(identity),
        ))
    return entries


def discard_tree(path: Path) -> bool:
    """尽力删除目录或文件，失败时忽略，返回目标是否已不存在

    真正的失败会在随后创建目录时暴露出来。
    """
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.exists():
            shutil.rmtree(path)
    except OSError as e:
        logger.debug("清理失败（忽略）: %s: %s", path, e)
    return not path.exists()


def read_checksum_manifest(path: Path) -> ChecksumManifest | None:
    data = load_json(path)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"校验和清单格式错误: {path}")
    return ChecksumManifest.from_dict(data)


def write_checksum_manifest(path: Path, manifest: ChecksumManifest) -> None:
    save_json(path, manifest.to_dict())


class Synchronizer:
    """vendor 条目同步器"""

    def __init__(
        self,
        path_filter: PathFilter | None = None,
        checksum_filename: str = DEFAULT_CHECKSUM_FILENAME,
    ) -> None:
        self.path_filter = path_filter or PathFilter.default()
        self.checksum_filename = checksum_filename

    def sync(self, entries: Iterable[VendorEntry]) -> CopyReport:
        report = CopyReport()
        for entry in entries:
            report.touched.add(entry.dest)
            if self.sync_entry(entry):
                report.copied.append(entry)
            else:
                report.skipped.append(entry)
        return report

    def sync_entry(self, entry: VendorEntry) -> bool:
        """同步单个条目，返回是否执行了复制"""
        cksum_path = entry.dest / self.checksum_filename
        if entry.suffixed and cksum_path.exists():
            logger.debug("已存在，跳过: %s -> %s", entry.identity, entry.dest)
            return False

        src = entry.package.root
        logger.info("Vendoring %s (%s) to %s", entry.identity, src, entry.dest)

        discard_tree(entry.dest)
        try:
            entry.dest.mkdir(parents=True)
            rel_paths = select_files(src, entry.package.files, self.path_filter)
            files = copy_selected(src, entry.dest, rel_paths)
        except OSError as e:
            raise ResourceError(
                f"failed to copy over vendored sources for: {entry.identity}: {e}"
            ) from e

        manifest = ChecksumManifest(package=entry.package.checksum, files=files)
        try:
            write_checksum_manifest(cksum_path, manifest)
        except (OSError, TypeError, ValueError) as e:
            raise ResourceError(
                f"failed to write checksum file for: {entry.identity}: {e}"
            ) from e
        return True

