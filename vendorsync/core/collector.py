"""包收集

合并一个或多个工作区的已解析依赖集，得到 PackageIdentity -> ResolvedPackage 映射。
本地路径来源的包不 vendor，只记录其目录，供清理阶段保护。
"""

from __future__ import annotations

import logging
from typing import Iterable

from vendorsync.core.exceptions import FetchError, VendorError
from vendorsync.core.models import (
    CollectedPackages,
    PackageIdentity,
    PathOrigin,
    ResolvedPackage,
)
from vendorsync.core.protocols import PackageProvider

logger = logging.getLogger(__name__)


def collect_packages(
    workspaces: Iterable[str],
    provider: PackageProvider,
) -> CollectedPackages:
    """收集所有工作区的非本地包，同一标识跨工作区出现时合并（后者覆盖前者）"""
    packages: dict[PackageIdentity, ResolvedPackage] = {}
    local_paths = set()

    for ws in workspaces:
        try:
            identities = list(provider.resolve(ws))
        except VendorError:
            raise
        except (OSError, ValueError) as e:
            raise FetchError(f"加载工作区依赖失败: {ws}: {e}") from e

        for identity in identities:
            if isinstance(identity.origin, PathOrigin):
                local_paths.add(identity.origin.path)
                continue
            try:
                packages[identity] = provider.fetch(identity)
            except VendorError:
                raise
            except (OSError, ValueError) as e:
                raise FetchError(f"拉取包失败: {identity}: {e}") from e

    logger.debug(
        "已收集 %d 个包（%d 个本地路径包）", len(packages), len(local_paths),
    )
    return CollectedPackages(packages=packages, local_paths=frozenset(local_paths))
