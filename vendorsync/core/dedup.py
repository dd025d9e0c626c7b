"""版本去重规划

同名包按语义化版本取最高版本（忽略构建元数据）作为主版本，
主版本落到不带后缀的 <name> 目录，其余版本落到 <name>-<version>。

冲突规则:
  - 合并布局下同一 (name, version) 来自两个来源：无论配置如何都报错，
    两者无法共用一个目标目录
  - 启用 disallow_duplicates 且未启用 explicit_version 时，
    同名包出现多个版本即报错（两种布局都按包名判断，不区分来源）
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable, Hashable, Iterable

import semver

from vendorsync.core.exceptions import DuplicateVersionError, FetchError
from vendorsync.core.models import PackageIdentity, VersionPlan

logger = logging.getLogger(__name__)

GroupKey = Callable[[PackageIdentity], Hashable]


@lru_cache(maxsize=None)
def version_key(version: str) -> semver.Version:
    """版本排序键，去掉构建元数据"""
    try:
        return semver.Version.parse(version).replace(build=None)
    except ValueError as e:
        raise FetchError(f"无效的语义化版本号: {version!r}") from e


def by_name(identity: PackageIdentity) -> Hashable:
    return identity.name


def by_origin_and_name(identity: PackageIdentity) -> Hashable:
    return (identity.origin, identity.name)


def plan_versions(
    identities: Iterable[PackageIdentity],
    *,
    explicit_version: bool = False,
    disallow_duplicates: bool = False,
    merge_sources: bool = True,
) -> VersionPlan:
    """计算每个包是否需要版本后缀

    合并布局按包名分组；分来源布局下每个来源有独立目录，按 (来源, 包名) 分组。
    """
    ids = sorted(identities, key=lambda i: (i.name, version_key(i.version), str(i.origin)))
    group_key: GroupKey = by_name if merge_sources else by_origin_and_name

    if merge_sources:
        _check_same_version_conflicts(ids)

    groups: dict[Hashable, list[PackageIdentity]] = {}
    for identity in ids:
        groups.setdefault(group_key(identity), []).append(identity)

    max_versions: dict[Hashable, str] = {}
    suffixed: set[PackageIdentity] = set()
    for key, members in groups.items():
        top = max(members, key=lambda i: version_key(i.version))
        max_versions[key] = top.version
        for identity in members:
            if explicit_version or version_key(identity.version) != version_key(top.version):
                suffixed.add(identity)
            elif identity != top:
                # 仅构建元数据不同的两个主版本会落到同一个 <name> 目录
                raise DuplicateVersionError(
                    f"found duplicate version of package `{identity.name}` "
                    f"at {identity.version} and {top.version} "
                    f"sharing destination `{identity.name}`:\n"
                    f"\n"
                    f"\tsource 1: {identity.origin}\n"
                    f"\tsource 2: {top.origin}"
                )

    if disallow_duplicates and not explicit_version:
        _check_disallowed_duplicates(ids)

    logger.debug("版本规划: %d 个包，其中 %d 个带版本后缀", len(ids), len(suffixed))
    return VersionPlan(max_versions=max_versions, suffixed=frozenset(suffixed))


def _check_disallowed_duplicates(ids: list[PackageIdentity]) -> None:
    """同名包出现多个版本即报错，与布局无关，始终按包名分组"""
    groups: dict[Hashable, list[PackageIdentity]] = {}
    for identity in ids:
        groups.setdefault(by_name(identity), []).append(identity)

    for members in groups.values():
        top = max(members, key=lambda i: version_key(i.version))
        for identity in members:
            if version_key(identity.version) != version_key(top.version):
                raise DuplicateVersionError(
                    f"found duplicate versions of package `{identity.name}` "
                    f"at {identity.version} and {top.version}, "
                    f"but this was disallowed via --disallow-duplicates\n"
                    f"\n"
                    f"\tsource 1: {identity.origin}\n"
                    f"\tsource 2: {top.origin}"
                )


def _check_same_version_conflicts(ids: list[PackageIdentity]) -> None:
    seen: dict[tuple[str, str], PackageIdentity] = {}
    for identity in ids:
        key = (identity.name, identity.version)
        prev = seen.get(key)
        if prev is not None and prev.origin != identity.origin:
            raise DuplicateVersionError(
                f"found duplicate version of package `{identity.name} v{identity.version}` "
                f"vendored from two sources:\n"
                f"\n"
                f"\tsource 1: {prev.origin}\n"
                f"\tsource 2: {identity.origin}"
            )
        seen[key] = identity
