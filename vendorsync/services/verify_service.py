"""vendor 目录校验

按每个包的校验和清单重新计算文件哈希，报告被改动、缺失或多出的文件，
用于审计已提交到版本库的第三方源码。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from vendorsync.core.exceptions import ResourceError
from vendorsync.core.hasher import sha256_file
from vendorsync.core.pruner import SourcesIndex, scan_existing
from vendorsync.core.synchronizer import read_checksum_manifest

logger = logging.getLogger(__name__)


@dataclass
class VerifyProblem:
    entry: Path
    rel_path: str
    kind: str  # "modified", "missing", "extra"


@dataclass
class VerifyReport:
    checked: int = 0
    problems: list[VerifyProblem] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


def verify_vendor(
    vendor_dir: Path,
    checksum_filename: str = ".cargo-checksum.json",
    sources_file: str = ".sources",
) -> VerifyReport:
    """校验 vendor 目录下所有带校验和清单的包"""
    report = VerifyReport()
    source_dirs = SourcesIndex(vendor_dir, sources_file).load()
    for entry in sorted(scan_existing(vendor_dir, (checksum_filename,), source_dirs)):
        report.checked += 1
        report.problems.extend(_verify_entry(entry, checksum_filename))

    logger.info("已校验 %d 个包，发现 %d 处问题", report.checked, len(report.problems))
    return report


def _verify_entry(entry: Path, checksum_filename: str) -> list[VerifyProblem]:
    try:
        manifest = read_checksum_manifest(entry / checksum_filename)
    except (OSError, ValueError) as e:
        raise ResourceError(f"无法读取校验和清单 {entry / checksum_filename}: {e}") from e
    if manifest is None:
        return []

    problems = []
    for rel, expected in sorted(manifest.files.items()):
        path = entry.joinpath(*rel.split("/"))
        if not path.is_file():
            problems.append(VerifyProblem(entry, rel, "missing"))
        elif sha256_file(path) != expected:
            problems.append(VerifyProblem(entry, rel, "modified"))

    for path in sorted(entry.rglob("*")):
        if not path.is_file() or (path.parent == entry and path.name == checksum_filename):
            continue
        rel = path.relative_to(entry).as_posix()
        if rel not in manifest.files:
            problems.append(VerifyProblem(entry, rel, "extra"))
    return problems
