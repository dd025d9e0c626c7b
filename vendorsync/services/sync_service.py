"""同步服务：CLI 与其他入口共享的 vendor 流程

流程（单线程，严格按序）:
  1. 包收集        collect_packages
  2. 版本 / 布局规划 plan_versions + plan_layout
  3. 复制          Synchronizer
  4. 清理          prune + SourcesIndex.reconcile
  5. 生成替换配置   ConfigEmitter
清理只在所有复制决策完成之后进行，不会删掉本次要复用的目录。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vendorsync.core.collector import collect_packages
from vendorsync.core.config import Config, get_config
from vendorsync.core.dedup import plan_versions, version_key
from vendorsync.core.emitter import ConfigEmitter, render_toml
from vendorsync.core.exceptions import ResourceError
from vendorsync.core.layout import filter_only_git, plan_layout
from vendorsync.core.models import PackageIdentity, VendorEntry
from vendorsync.core.protocols import PackageProvider
from vendorsync.core.pruner import (
    SourcesIndex,
    prune,
    registry_entry_predicate,
    scan_existing,
)
from vendorsync.core.resolution import ResolutionFileProvider
from vendorsync.core.selector import PathFilter
from vendorsync.core.synchronizer import Synchronizer, build_entries

logger = logging.getLogger(__name__)


@dataclass
class SyncRequest:
    """同步请求 DTO"""

    vendor_dir: str = "vendor"
    workspaces: list[str] = field(default_factory=list)
    explicit_version: bool = False
    disallow_duplicates: bool = False
    no_delete: bool = False
    only_git: bool = False
    relative_path: bool = False
    merge_sources: bool = True


@dataclass
class SyncResult:
    """同步结果"""

    entries: list[VendorEntry] = field(default_factory=list)
    copied: list[VendorEntry] = field(default_factory=list)
    skipped: list[VendorEntry] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)
    config: dict[str, Any] = field(default_factory=dict)

    @property
    def config_text(self) -> str:
        return render_toml(self.config)


def _sort_key(identity: PackageIdentity) -> tuple:
    return (identity.name, version_key(identity.version), str(identity.origin))


class SyncService:
    """vendor 目录同步服务"""

    def __init__(
        self,
        provider: PackageProvider | None = None,
        config: Config | None = None,
        cwd: Path | None = None,
    ) -> None:
        self.cwd = cwd or Path.cwd()
        self.config = config or get_config()
        self.provider = provider or ResolutionFileProvider(
            self.config.resolution_file, base_dir=self.cwd,
        )

    def execute(self, req: SyncRequest) -> SyncResult:
        cfg = self.config
        vendor_dir = self.cwd / req.vendor_dir
        try:
            vendor_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ResourceError(f"failed to create: `{vendor_dir}`: {e}") from e

        collected = collect_packages(req.workspaces or ["."], self.provider)

        identities = sorted(collected.identities(), key=_sort_key)
        # 主版本按全部包计算，--only-git 只决定本次写入哪些条目
        versions = plan_versions(
            identities,
            explicit_version=req.explicit_version,
            disallow_duplicates=req.disallow_duplicates,
            merge_sources=req.merge_sources,
        )
        if req.only_git:
            identities = filter_only_git(identities)
        layout = plan_layout(identities, vendor_dir, merge_sources=req.merge_sources)

        index = SourcesIndex(vendor_dir, cfg.sources_file)
        existing = scan_existing(
            vendor_dir,
            markers=(cfg.manifest_file, cfg.checksum_filename),
            source_dirs=index.load(),
        )
        index.record(layout.source_dirs())

        entries = build_entries(collected, identities, versions, layout)
        synchronizer = Synchronizer(
            path_filter=PathFilter.default(
                ready_marker=cfg.ready_marker,
                extra_names=cfg.exclude_names,
                extra_suffixes=cfg.exclude_suffixes,
            ),
            checksum_filename=cfg.checksum_filename,
        )
        report = synchronizer.sync(entries)

        removed: list[Path] = []
        if not req.no_delete:
            keep = None
            if req.only_git:
                keep = registry_entry_predicate(vendor_dir, cfg.checksum_filename)
            removed = prune(existing, report.touched, collected.local_paths, keep=keep)
        index.reconcile(layout.source_dirs(), merge_sources=req.merge_sources)

        emitter = ConfigEmitter(
            cwd=self.cwd,
            relative_path=req.relative_path,
            default_registry_url=cfg.default_registry_url,
            default_registry_name=cfg.default_registry_name,
            vendored_name=cfg.vendored_sources_name,
        )
        logger.info(
            "同步完成: %d 个包, 复制 %d, 跳过 %d, 删除 %d",
            len(entries), len(report.copied), len(report.skipped), len(removed),
        )
        return SyncResult(
            entries=entries,
            copied=report.copied,
            skipped=report.skipped,
            removed=removed,
            config=emitter.build(layout),
        )
