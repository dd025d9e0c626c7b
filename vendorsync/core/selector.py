"""文件选择器

决定包目录中哪些文件属于发布内容，并按相对路径逐个复制。

排除规则由 PathFilter 统一表达，遍历目录与过滤权威文件列表
两条路径共用同一个判定，保证两者的排除语义一致:
  - 版本控制元数据（.git / .gitignore / .gitattributes 等）
  - 拉取层的就绪标记文件（如 .cargo-ok）
  - 补丁残留（*.orig / *.rej）
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from vendorsync.core.hasher import sha256_file

logger = logging.getLogger(__name__)

VCS_NAMES = frozenset({
    ".git", ".gitattributes", ".gitignore", ".gitmodules",
    ".hg", ".hgignore", ".svn",
})
PATCH_SUFFIXES = (".orig", ".rej")


@dataclass(frozen=True)
class PathFilter:
    """按路径分量匹配的排除规则"""

    names: frozenset[str] = VCS_NAMES
    suffixes: tuple[str, ...] = PATCH_SUFFIXES

    @classmethod
    def default(
        cls,
        ready_marker: str = ".cargo-ok",
        extra_names: list[str] | None = None,
        extra_suffixes: list[str] | None = None,
    ) -> PathFilter:
        names = set(VCS_NAMES)
        if ready_marker:
            names.add(ready_marker)
        names.update(extra_names or [])
        return cls(
            names=frozenset(names),
            suffixes=PATCH_SUFFIXES + tuple(extra_suffixes or []),
        )

    def excludes_name(self, name: str) -> bool:
        return name in self.names or name.endswith(self.suffixes)

    def accepts(self, rel_path: str) -> bool:
        """相对路径的任一分量命中排除规则即拒绝"""
        return not any(self.excludes_name(part) for part in split_rel_path(rel_path))


def split_rel_path(rel_path: str) -> list[str]:
    """拆分相对路径，兼容 / 与 \\ 两种分隔符"""
    return [p for p in rel_path.replace("\\", "/").split("/") if p and p != "."]


def canonical_rel_path(rel_path: str) -> str:
    return str(PurePosixPath(*split_rel_path(rel_path)))


def select_files(
    root: Path,
    files: tuple[str, ...] | list[str] | None = None,
    path_filter: PathFilter | None = None,
) -> list[str]:
    """返回需复制的文件（规范化的 / 分隔相对路径，已排序）

    有权威列表时只对列表做过滤，否则遍历 root。
    """
    path_filter = path_filter or PathFilter.default()
    if files is not None:
        selected = set()
        for f in files:
            parts = split_rel_path(f)
            if not parts or not path_filter.accepts(f):
                continue
            if ".." in parts:
                logger.warning("忽略越出包目录的文件: %s (%s)", f, root)
                continue
            selected.add(canonical_rel_path(f))
        return sorted(selected)
    return sorted(_walk(root, path_filter))


def _walk(root: Path, path_filter: PathFilter) -> list[str]:
    found: list[str] = []

    def _on_error(err: OSError) -> None:
        raise err

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        base = Path(dirpath)
        kept_dirs = []
        for d in sorted(dirnames):
            if path_filter.excludes_name(d):
                continue
            if (base / d).is_symlink():
                logger.debug("跳过目录符号链接: %s", base / d)
                continue
            kept_dirs.append(d)
        dirnames[:] = kept_dirs

        rel_base = base.relative_to(root)
        for name in sorted(filenames):
            if path_filter.excludes_name(name):
                continue
            found.append((rel_base / name).as_posix())
    return found


def copy_selected(root: Path, dest: Path, rel_paths: list[str]) -> dict[str, str]:
    """逐个复制文件并计算哈希，返回 {相对路径: sha256}

    目标路径按分量逐级拼接，权威列表中混用的分隔符不会生成非法路径。
    """
    checksums: dict[str, str] = {}
    for rel in rel_paths:
        parts = split_rel_path(rel)
        src = root.joinpath(*parts)
        dst = dest.joinpath(*parts)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
        checksums["/".join(parts)] = sha256_file(dst)
    return checksums
