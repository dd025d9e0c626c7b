"""过期条目清理

本次运行开始前已存在、但本次未写入的包目录会被删除，以下除外:
  - 本地路径来源的包（使用方项目自己的代码，可能正好放在 vendor 目录里）
  - keep 判定保留的条目（如 --only-git 运行时的注册表包）

分来源布局额外维护 vendor/.sources 索引，记录各来源子目录名，
用于下次运行时找到这些子目录下的包，并回收已清空的子目录。
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Iterable

from vendorsync.core.exceptions import ResourceError
from vendorsync.core.synchronizer import read_checksum_manifest
from vendorsync.utils.file_io import load_json, save_json

logger = logging.getLogger(__name__)

DEFAULT_SOURCES_FILE = ".sources"


def _norm(path: Path) -> str:
    return os.path.normcase(str(path.resolve()))


def _is_entry(path: Path, markers: Iterable[str]) -> bool:
    return path.is_dir() and any((path / m).is_file() for m in markers)


def scan_existing(
    vendor_dir: Path,
    markers: Iterable[str],
    source_dirs: Iterable[str] = (),
) -> set[Path]:
    """列出 vendor 目录中已有的包目录

    包目录指直接包含任一标记文件（包清单 / 校验和清单）的目录，
    扫描 vendor 顶层以及索引中记录的各来源子目录。
    """
    markers = tuple(markers)
    found: set[Path] = set()
    roots = [vendor_dir] + [vendor_dir / name for name in source_dirs]
    for root in roots:
        if not root.is_dir():
            continue
        for child in root.iterdir():
            if _is_entry(child, markers):
                found.add(child)
    return found


def registry_entry_predicate(
    vendor_dir: Path,
    checksum_filename: str,
) -> Callable[[Path], bool]:
    """判断已有条目是否来自注册表（用于 --only-git 运行时保留）"""
    vendor_norm = _norm(vendor_dir)

    def _predicate(path: Path) -> bool:
        if _norm(path.parent) != vendor_norm:
            return path.parent.name.startswith("registry-")
        try:
            manifest = read_checksum_manifest(path / checksum_filename)
        except (OSError, ValueError):
            return False
        return manifest is not None and manifest.package is not None

    return _predicate


def prune(
    existing: Iterable[Path],
    touched: Iterable[Path],
    protected: Iterable[Path] = (),
    keep: Callable[[Path], bool] | None = None,
) -> list[Path]:
    """删除 existing - touched - protected 中的目录，返回已删除路径"""
    touched_set = {_norm(p) for p in touched}
    protected_set = {_norm(p) for p in protected}

    removed = []
    for path in sorted(existing):
        key = _norm(path)
        if key in touched_set:
            continue
        if key in protected_set:
            logger.debug("本地路径包，保留: %s", path)
            continue
        if keep is not None and keep(path):
            logger.debug("本次运行未覆盖，保留: %s", path)
            continue
        logger.info("Removing %s", path)
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise ResourceError(f"failed to remove stale vendor entry {path}: {e}") from e
        removed.append(path)
    return removed


class SourcesIndex:
    """分来源子目录索引（vendor/.sources，JSON 数组）"""

    def __init__(self, vendor_dir: Path, filename: str = DEFAULT_SOURCES_FILE) -> None:
        self.vendor_dir = vendor_dir
        self.path = vendor_dir / filename

    def load(self) -> set[str]:
        try:
            data = load_json(self.path)
        except (OSError, ValueError) as e:
            raise ResourceError(f"无法读取来源索引 {self.path}: {e}") from e
        if data is None:
            return set()
        if not isinstance(data, list) or not all(isinstance(n, str) for n in data):
            raise ResourceError(f"来源索引格式错误（应为字符串数组）: {self.path}")
        return set(data)

    def save(self, names: Iterable[str]) -> None:
        try:
            save_json(self.path, sorted(set(names)))
        except OSError as e:
            raise ResourceError(f"无法写入来源索引 {self.path}: {e}") from e

    def remove(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise ResourceError(f"无法删除来源索引 {self.path}: {e}") from e

    def record(self, names: Iterable[str]) -> None:
        """在复制前登记即将使用的子目录，中途失败也能在下次运行时找到它们"""
        names = set(names)
        if not names:
            return
        previous = self.load()
        if not names <= previous:
            self.save(previous | names)

    def reconcile(self, used: Iterable[str], *, merge_sources: bool) -> set[str]:
        """回收未使用且已清空的子目录，返回仍在索引中的子目录名"""
        used = set(used)
        retained: set[str] = set()
        for name in sorted(self.load() - used):
            subdir = self.vendor_dir / name
            if not subdir.is_dir():
                continue
            if any(subdir.iterdir()):
                retained.add(name)
                continue
            try:
                subdir.rmdir()
            except OSError as e:
                raise ResourceError(f"无法删除空的来源目录 {subdir}: {e}") from e
            logger.debug("已回收来源目录: %s", subdir)

        live = used | retained
        if merge_sources and not live:
            self.remove()
        else:
            self.save(live)
        return live
