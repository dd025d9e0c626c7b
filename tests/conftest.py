"""测试共享 fixture：在 tmp_path 下构造包源码目录 + 内存版 PackageProvider"""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import Callable

import pytest

from vendorsync.core.config import DEFAULT_REGISTRY_URL, reset_config
from vendorsync.core.models import (
    GitOrigin,
    OriginId,
    PackageIdentity,
    PathOrigin,
    RegistryOrigin,
    ResolvedPackage,
)

CRATES_IO = RegistryOrigin(url=DEFAULT_REGISTRY_URL)


class StaticProvider:
    """按工作区名返回预先构造好的包"""

    def __init__(self) -> None:
        self.workspaces: dict[str, list[PackageIdentity]] = {}
        self.packages: dict[PackageIdentity, ResolvedPackage] = {}
        self.fetched: list[PackageIdentity] = []

    def set(self, workspace: str, *items: ResolvedPackage | PackageIdentity) -> None:
        ids = []
        for item in items:
            if isinstance(item, ResolvedPackage):
                self.packages[item.identity] = item
                ids.append(item.identity)
            else:
                ids.append(item)
        self.workspaces[workspace] = ids

    def resolve(self, workspace: str) -> list[PackageIdentity]:
        return list(self.workspaces[workspace])

    def fetch(self, identity: PackageIdentity) -> ResolvedPackage:
        self.fetched.append(identity)
        return self.packages[identity]


def default_files(name: str, version: str) -> dict[str, str]:
    return {
        "Cargo.toml": f'[package]\nname = "{name}"\nversion = "{version}"\n',
        "src/lib.rs": f"// {name} {version}\n",
    }


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def provider() -> StaticProvider:
    return StaticProvider()


@pytest.fixture
def make_package(tmp_path: Path) -> Callable[..., ResolvedPackage]:
    """在 tmp_path/sources 下写出包源码，返回 ResolvedPackage"""
    counter = itertools.count()

    def _make(
        name: str,
        version: str,
        origin: OriginId = CRATES_IO,
        files: dict[str, str] | None = None,
        listed: list[str] | None = None,
        checksum: str | None = "default",
    ) -> ResolvedPackage:
        root = tmp_path / "sources" / f"{next(counter)}" / f"{name}-{version}"
        contents = default_files(name, version) if files is None else files
        for rel, text in contents.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        root.mkdir(parents=True, exist_ok=True)

        if checksum == "default":
            checksum = None if isinstance(origin, GitOrigin) else f"cksum-{name}-{version}"
        return ResolvedPackage(
            identity=PackageIdentity(name=name, version=version, origin=origin),
            root=root,
            files=tuple(listed) if listed is not None else None,
            checksum=checksum,
        )

    return _make


@pytest.fixture
def path_identity() -> Callable[[str, str, Path], PackageIdentity]:
    def _make(name: str, version: str, path: Path) -> PackageIdentity:
        return PackageIdentity(name=name, version=version, origin=PathOrigin(path=path))

    return _make
