"""外部协作方接口契约

依赖解析器与拉取/缓存层不属于本项目，这里用 typing.Protocol
描述同步引擎对它们的最小要求，测试可直接替换为内存实现。
"""

from __future__ import annotations

from typing import Iterable, Protocol

from vendorsync.core.models import PackageIdentity, ResolvedPackage


class PackageProvider(Protocol):
    """已解析依赖集的提供者

    resolve(): 返回某个工作区完整闭包中的全部包标识（含本地路径包）
    fetch():   保证包源码已在本地，返回其根目录、文件列表与源校验和
    """

    def resolve(self, workspace: str) -> Iterable[PackageIdentity]:
        ...

    def fetch(self, identity: PackageIdentity) -> ResolvedPackage:
        ...
