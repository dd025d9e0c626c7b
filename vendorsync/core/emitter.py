"""替换源配置生成

生成构建工具消费 vendor 目录所需的 [source] 配置:
  - vendor 目录本身声明为 directory 类型的源（分来源布局下每个子目录一个）
  - 每个原始来源一个替换块，replace-with 指向对应的 vendor 源

示例（合并布局）:
    [source.crates-io]
    replace-with = "vendored-sources"

    [source.vendored-sources]
    directory = "vendor"
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import toml

from vendorsync.core.config import DEFAULT_REGISTRY_URL
from vendorsync.core.exceptions import OriginError
from vendorsync.core.models import (
    GitOrigin,
    LayoutPlan,
    OriginId,
    PathOrigin,
    RegistryOrigin,
)

logger = logging.getLogger(__name__)


class _NameAllocator:
    """块名分配，重名时追加数字后缀 -2、-3 ..."""

    def __init__(self) -> None:
        self._used: set[str] = set()

    def claim(self, name: str) -> str:
        candidate = name
        n = 1
        while candidate in self._used:
            n += 1
            candidate = f"{name}-{n}"
        self._used.add(candidate)
        return candidate


class ConfigEmitter:
    """替换源配置生成器"""

    def __init__(
        self,
        *,
        cwd: Path | None = None,
        relative_path: bool = False,
        default_registry_url: str = DEFAULT_REGISTRY_URL,
        default_registry_name: str = "crates-io",
        vendored_name: str = "vendored-sources",
    ) -> None:
        self.cwd = cwd or Path.cwd()
        self.relative_path = relative_path
        self.default_registry_url = default_registry_url
        self.default_registry_name = default_registry_name
        self.vendored_name = vendored_name

    def build(self, layout: LayoutPlan) -> dict[str, Any]:
        names = _NameAllocator()
        sources: dict[str, dict[str, str]] = {}

        if layout.merge_sources:
            vendored = names.claim(self.vendored_name)
            sources[vendored] = {"directory": self.directory(layout.vendor_dir)}

        for origin in layout.origins():
            block_name = self.block_name(origin)
            if layout.merge_sources:
                replace_with = vendored
            else:
                replace_with = names.claim(f"vendor+{block_name}")
                sources[replace_with] = {
                    "directory": self.directory(layout.root_for(origin)),
                }
            sources[names.claim(block_name)] = self.replacement(origin, replace_with)

        return {"source": {k: sources[k] for k in sorted(sources)}}

    def render(self, layout: LayoutPlan) -> str:
        return render_toml(self.build(layout))

    def block_name(self, origin: OriginId) -> str:
        if isinstance(origin, RegistryOrigin):
            if self.is_default_registry(origin):
                return self.default_registry_name
            return origin.url
        if isinstance(origin, GitOrigin):
            return origin.url
        raise OriginError(f"无法为该来源生成替换配置: {origin}")

    def replacement(self, origin: OriginId, replace_with: str) -> dict[str, str]:
        if isinstance(origin, RegistryOrigin):
            if self.is_default_registry(origin):
                return {"replace-with": replace_with}
            return {"registry": origin.url, "replace-with": replace_with}
        if isinstance(origin, GitOrigin):
            block = {"git": origin.url}
            if origin.reference is not None:
                block[origin.reference.kind.value] = origin.reference.value
            block["replace-with"] = replace_with
            return block
        if isinstance(origin, PathOrigin):
            raise OriginError(f"本地路径来源不应出现在替换配置中: {origin}")
        raise OriginError(f"未知的来源类型: {origin!r}")

    def is_default_registry(self, origin: RegistryOrigin) -> bool:
        return origin.url.rstrip("/") == self.default_registry_url.rstrip("/")

    def directory(self, path: Path) -> str:
        absolute = os.path.abspath(self.cwd / path)
        if self.relative_path:
            return Path(os.path.relpath(absolute, self.cwd)).as_posix()
        return absolute


def render_toml(config: dict[str, Any]) -> str:
    return toml.dumps(config)
