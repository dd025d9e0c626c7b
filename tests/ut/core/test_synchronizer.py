"""同步器测试"""

import json
from pathlib import Path

import pytest

from vendorsync.core.exceptions import ResourceError
from vendorsync.core.models import (
    PackageIdentity,
    RegistryOrigin,
    ResolvedPackage,
    VendorEntry,
)
from vendorsync.core.synchronizer import (
    Synchronizer,
    discard_tree,
    read_checksum_manifest,
)

CRATES = RegistryOrigin(url="https://github.com/rust-lang/crates.io-index")


def _package(tmp_path: Path, name: str = "bitflags", version: str = "0.8.0") -> ResolvedPackage:
    root = tmp_path / "src" / f"{name}-{version}"
    (root / "src").mkdir(parents=True)
    (root / "Cargo.toml").write_text(f'name = "{name}"\n', encoding="utf-8")
    (root / "src" / "lib.rs").write_text("// lib\n", encoding="utf-8")
    (root / ".cargo-ok").write_text("", encoding="utf-8")
    return ResolvedPackage(
        identity=PackageIdentity(name=name, version=version, origin=CRATES),
        root=root,
        checksum="abc123",
    )


def _entry(pkg: ResolvedPackage, dest: Path, suffixed: bool = False) -> VendorEntry:
    return VendorEntry(package=pkg, dest_name=dest.name, dest=dest, suffixed=suffixed)


class TestSynchronizer:
    def test_copy_writes_manifest(self, tmp_path: Path) -> None:
        pkg = _package(tmp_path)
        dest = tmp_path / "vendor" / "bitflags"

        report = Synchronizer().sync([_entry(pkg, dest)])

        assert report.copied and not report.skipped
        assert report.touched == {dest}
        assert not (dest / ".cargo-ok").exists()
        data = json.loads((dest / ".cargo-checksum.json").read_text(encoding="utf-8"))
        assert data["package"] == "abc123"
        assert sorted(data["files"]) == ["Cargo.toml", "src/lib.rs"]

    def test_manifest_bytes_are_stable(self, tmp_path: Path) -> None:
        pkg = _package(tmp_path)
        dest = tmp_path / "vendor" / "bitflags"
        sync = Synchronizer()

        sync.sync_entry(_entry(pkg, dest))
        first = (dest / ".cargo-checksum.json").read_bytes()
        sync.sync_entry(_entry(pkg, dest))
        assert (dest / ".cargo-checksum.json").read_bytes() == first

    def test_unsuffixed_is_recopied(self, tmp_path: Path) -> None:
        pkg = _package(tmp_path)
        dest = tmp_path / "vendor" / "bitflags"
        sync = Synchronizer()
        sync.sync_entry(_entry(pkg, dest))
        (dest / "stale.rs").write_text("old", encoding="utf-8")

        assert sync.sync_entry(_entry(pkg, dest)) is True
        assert not (dest / "stale.rs").exists()

    def test_suffixed_with_manifest_is_skipped(self, tmp_path: Path) -> None:
        pkg = _package(tmp_path, version="0.7.0")
        dest = tmp_path / "vendor" / "bitflags-0.7.0"
        sync = Synchronizer()
        sync.sync_entry(_entry(pkg, dest, suffixed=True))
        (dest / "marker").write_text("keep", encoding="utf-8")

        report = sync.sync([_entry(pkg, dest, suffixed=True)])

        assert report.skipped and not report.copied
        assert (dest / "marker").exists()
        assert dest in report.touched

    def test_suffixed_without_manifest_is_copied(self, tmp_path: Path) -> None:
        pkg = _package(tmp_path, version="0.7.0")
        dest = tmp_path / "vendor" / "bitflags-0.7.0"
        dest.mkdir(parents=True)
        (dest / "partial").write_text("", encoding="utf-8")

        assert Synchronizer().sync_entry(_entry(pkg, dest, suffixed=True)) is True
        assert not (dest / "partial").exists()
        assert (dest / ".cargo-checksum.json").is_file()

    def test_destination_blocked_by_file(self, tmp_path: Path) -> None:
        pkg = _package(tmp_path)
        vendor = tmp_path / "vendor"
        vendor.mkdir()
        # 父路径是普通文件，创建目录必然失败
        blocker = vendor / "blocker"
        blocker.write_text("", encoding="utf-8")

        with pytest.raises(ResourceError, match="failed to copy over vendored sources"):
            Synchronizer().sync_entry(_entry(pkg, blocker / "bitflags"))

    def test_missing_source_file(self, tmp_path: Path) -> None:
        pkg = _package(tmp_path)
        listed = ResolvedPackage(
            identity=pkg.identity, root=pkg.root, files=("Cargo.toml", "missing.rs"),
        )
        with pytest.raises(ResourceError):
            Synchronizer().sync_entry(_entry(listed, tmp_path / "vendor" / "bitflags"))


class TestDiscardTree:
    def test_removes_directory(self, tmp_path: Path) -> None:
        d = tmp_path / "d"
        (d / "x").mkdir(parents=True)
        assert discard_tree(d) is True
        assert not d.exists()

    def test_removes_file(self, tmp_path: Path) -> None:
        f = tmp_path / "f"
        f.write_text("", encoding="utf-8")
        assert discard_tree(f) is True

    def test_missing_is_fine(self, tmp_path: Path) -> None:
        assert discard_tree(tmp_path / "nope") is True


class TestChecksumManifestIO:
    def test_missing_returns_none(self, tmp_path: Path) -> None:
        assert read_checksum_manifest(tmp_path / ".cargo-checksum.json") is None

    def test_non_object_rejected(self, tmp_path: Path) -> None:
        p = tmp_path / ".cargo-checksum.json"
        p.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError):
            read_checksum_manifest(p)
