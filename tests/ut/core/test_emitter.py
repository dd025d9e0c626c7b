"""替换源配置生成测试"""

import os
from pathlib import Path

import pytest
import toml

from vendorsync.core.emitter import ConfigEmitter, _NameAllocator
from vendorsync.core.exceptions import OriginError
from vendorsync.core.layout import plan_layout, source_dir_name
from vendorsync.core.models import (
    GitOrigin,
    GitRefKind,
    GitReference,
    PackageIdentity,
    PathOrigin,
    RegistryOrigin,
)

CRATES = RegistryOrigin(url="https://github.com/rust-lang/crates.io-index")
MIRROR = RegistryOrigin(url="https://mirror.example.com/index")
GIT_REV = GitOrigin(
    url="https://github.com/alexcrichton/futures-rs",
    reference=GitReference(kind=GitRefKind.REV, value="03a0005cb6498e4330"),
)
GIT_BRANCH = GitOrigin(
    url="https://github.com/alexcrichton/futures-rs",
    reference=GitReference(kind=GitRefKind.BRANCH, value="master"),
)


def _id(name: str, origin) -> PackageIdentity:
    return PackageIdentity(name=name, version="1.0.0", origin=origin)


class TestNameAllocator:
    def test_collisions_get_numeric_suffix(self) -> None:
        names = _NameAllocator()
        assert names.claim("a") == "a"
        assert names.claim("a") == "a-2"
        assert names.claim("a") == "a-3"


class TestConfigEmitterMerged:
    def test_default_registry(self, tmp_path: Path) -> None:
        layout = plan_layout([_id("bitflags", CRATES)], tmp_path / "vendor")
        cfg = ConfigEmitter(cwd=tmp_path).build(layout)

        assert cfg == {"source": {
            "crates-io": {"replace-with": "vendored-sources"},
            "vendored-sources": {"directory": os.path.abspath(tmp_path / "vendor")},
        }}

    def test_relative_path(self, tmp_path: Path) -> None:
        layout = plan_layout([_id("bitflags", CRATES)], tmp_path / "vendor")
        cfg = ConfigEmitter(cwd=tmp_path, relative_path=True).build(layout)
        assert cfg["source"]["vendored-sources"]["directory"] == "vendor"

    def test_git_and_mirror(self, tmp_path: Path) -> None:
        layout = plan_layout(
            [_id("a", CRATES), _id("b", MIRROR), _id("c", GIT_REV)],
            tmp_path / "vendor",
        )
        sources = ConfigEmitter(cwd=tmp_path).build(layout)["source"]

        assert sources[MIRROR.url] == {
            "registry": MIRROR.url, "replace-with": "vendored-sources",
        }
        assert sources[GIT_REV.url] == {
            "git": GIT_REV.url,
            "rev": "03a0005cb6498e4330",
            "replace-with": "vendored-sources",
        }

    def test_same_git_url_two_refs(self, tmp_path: Path) -> None:
        layout = plan_layout(
            [_id("a", GIT_BRANCH), _id("b", GIT_REV)], tmp_path / "vendor",
        )
        sources = ConfigEmitter(cwd=tmp_path).build(layout)["source"]

        url = GIT_REV.url
        assert {sources[url].get("branch"), sources[f"{url}-2"].get("branch")} == {
            "master", None,
        }
        assert len(sources) == 3

    def test_path_origin_rejected(self, tmp_path: Path) -> None:
        emitter = ConfigEmitter(cwd=tmp_path)
        with pytest.raises(OriginError):
            emitter.replacement(PathOrigin(path=tmp_path), "vendored-sources")

    def test_render_round_trip(self, tmp_path: Path) -> None:
        layout = plan_layout([_id("a", CRATES), _id("c", GIT_REV)], tmp_path / "vendor")
        emitter = ConfigEmitter(cwd=tmp_path, relative_path=True)
        assert toml.loads(emitter.render(layout)) == emitter.build(layout)


class TestConfigEmitterSplit:
    def test_one_directory_per_origin(self, tmp_path: Path) -> None:
        vendor = tmp_path / "vendor"
        layout = plan_layout(
            [_id("a", CRATES), _id("c", GIT_REV)], vendor, merge_sources=False,
        )
        sources = ConfigEmitter(cwd=tmp_path, relative_path=True).build(layout)["source"]

        assert sources["crates-io"] == {"replace-with": "vendor+crates-io"}
        assert sources["vendor+crates-io"] == {
            "directory": f"vendor/{source_dir_name(CRATES)}",
        }
        git_block = f"vendor+{GIT_REV.url}"
        assert sources[GIT_REV.url]["replace-with"] == git_block
        assert sources[git_block] == {"directory": f"vendor/{source_dir_name(GIT_REV)}"}
        assert "vendored-sources" not in sources
