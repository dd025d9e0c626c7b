"""来源布局规划

两种布局:
  - 合并（merged）：所有包直接落在 vendor 目录下
  - 分来源（split）：每个来源一个子目录 vendor/<kind>-<hash>，
    hash 由来源的规范标识计算，跨运行稳定
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from vendorsync.core.exceptions import FetchError, OriginError
from vendorsync.core.hasher import sha256_text
from vendorsync.core.models import (
    GitOrigin,
    LayoutPlan,
    OriginId,
    PackageIdentity,
    PathOrigin,
    RegistryOrigin,
)

logger = logging.getLogger(__name__)

SOURCE_HASH_LEN = 16


def origin_kind_label(origin: OriginId) -> str:
    """来源类型 -> 子目录前缀"""
    if isinstance(origin, RegistryOrigin):
        return "registry"
    if isinstance(origin, GitOrigin):
        return "git"
    if isinstance(origin, PathOrigin):
        raise OriginError(f"本地路径来源不能 vendor: {origin}")
    raise OriginError(f"未知的来源类型: {origin!r}")


def source_dir_name(origin: OriginId) -> str:
    """分来源布局下的子目录名，例如 registry-1ecc6299db9ec823"""
    digest = sha256_text(origin.canonical())[:SOURCE_HASH_LEN]
    return f"{origin_kind_label(origin)}-{digest}"


def filter_only_git(identities: Iterable[PackageIdentity]) -> list[PackageIdentity]:
    """只保留 Git 来源的包；一个都没有时报错"""
    kept = [i for i in identities if isinstance(i.origin, GitOrigin)]
    if not kept:
        raise FetchError("--only-git 指定仅 vendor Git 依赖，但没有找到任何 Git 依赖")
    return kept


def plan_layout(
    identities: Iterable[PackageIdentity],
    vendor_dir: Path,
    *,
    merge_sources: bool = True,
) -> LayoutPlan:
    roots: dict[OriginId, Path] = {}
    for identity in identities:
        origin = identity.origin
        if origin in roots:
            continue
        if merge_sources:
            origin_kind_label(origin)
            roots[origin] = vendor_dir
        else:
            roots[origin] = vendor_dir / source_dir_name(origin)

    logger.debug(
        "布局规划: %s, %d 个来源",
        "merged" if merge_sources else "split", len(roots),
    )
    return LayoutPlan(vendor_dir=vendor_dir, merge_sources=merge_sources, roots=roots)
