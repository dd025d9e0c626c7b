"""核心数据模型

包来源（OriginId）、包标识、已解析包、vendor 条目及各阶段的规划结果
集中定义于此。规划阶段之间只传递这些不可变值，不共享可变状态。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Union
from urllib.parse import parse_qsl, urlsplit, urlunsplit

from vendorsync.core.exceptions import OriginError

# =========================================================================
# 包来源
# =========================================================================


class OriginKind(str, Enum):
    """包来源类型"""
    REGISTRY = "registry"
    GIT = "git"
    PATH = "path"


class GitRefKind(str, Enum):
    """Git 引用类型"""
    BRANCH = "branch"
    TAG = "tag"
    REV = "rev"


@dataclass(frozen=True)
class GitReference:
    kind: GitRefKind
    value: str


@dataclass(frozen=True)
class RegistryOrigin:
    """注册表来源，以索引 URL 区分"""

    url: str

    @property
    def kind(self) -> OriginKind:
        return OriginKind.REGISTRY

    def canonical(self) -> str:
        if self.url.startswith("sparse+"):
            return self.url
        return f"registry+{self.url}"

    def __str__(self) -> str:
        return self.canonical()


@dataclass(frozen=True)
class GitOrigin:
    """Git 来源：URL + 固定的 branch/tag/rev

    precise 为锁定的提交号，不参与相等比较，
    同一引用前后两次解析到不同提交仍视为同一来源。
    """

    url: str
    reference: GitReference | None = None
    precise: str = field(default="", compare=False)

    @property
    def kind(self) -> OriginKind:
        return OriginKind.GIT

    def canonical(self) -> str:
        text = f"git+{self.url}"
        if self.reference is not None:
            text += f"?{self.reference.kind.value}={self.reference.value}"
        return text

    def __str__(self) -> str:
        if self.precise:
            return f"{self.canonical()}#{self.precise}"
        return self.canonical()


@dataclass(frozen=True)
class PathOrigin:
    """本地路径来源，属于使用方项目本身，永不 vendor"""

    path: Path

    @property
    def kind(self) -> OriginKind:
        return OriginKind.PATH

    def canonical(self) -> str:
        return f"path+{self.path.as_posix()}"

    def __str__(self) -> str:
        return self.canonical()


OriginId = Union[RegistryOrigin, GitOrigin, PathOrigin]


def parse_origin(text: str) -> OriginId:
    """解析锁文件风格的来源标识

    支持:
        registry+https://github.com/rust-lang/crates.io-index
        sparse+https://index.example.com/
        git+https://github.com/foo/bar?rev=abc123#abc123def
        path+file:///home/me/project/vendor/libc
    """
    kind, sep, rest = text.strip().partition("+")
    if not sep or not rest:
        raise OriginError(f"无法识别的包来源: {text!r}")

    if kind == "registry":
        return RegistryOrigin(url=rest)
    if kind == "sparse":
        return RegistryOrigin(url=f"sparse+{rest}")
    if kind == "git":
        return _parse_git(rest)
    if kind == "path":
        if rest.startswith("file://"):
            rest = urlsplit(rest).path
        return PathOrigin(path=Path(rest))
    raise OriginError(f"不支持的包来源类型 '{kind}': {text!r}")


def _parse_git(rest: str) -> GitOrigin:
    parts = urlsplit(rest)
    reference = None
    for key, value in parse_qsl(parts.query):
        try:
            ref_kind = GitRefKind(key)
        except ValueError:
            raise OriginError(f"未知的 Git 引用参数 '{key}': {rest!r}") from None
        if reference is not None:
            raise OriginError(f"Git 来源只能指定一个 branch/tag/rev: {rest!r}")
        reference = GitReference(kind=ref_kind, value=value)
    url = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
    return GitOrigin(url=url, reference=reference, precise=parts.fragment)


# =========================================================================
# 包
# =========================================================================


@dataclass(frozen=True)
class PackageIdentity:
    """包的唯一标识

    version 保留原始字符串，构建元数据 (+xxx) 参与相等比较；
    比较版本高低时才忽略构建元数据（见 dedup 模块）。
    """

    name: str
    version: str
    origin: OriginId

    def __str__(self) -> str:
        return f"{self.name} v{self.version} ({self.origin})"


@dataclass(frozen=True)
class ResolvedPackage:
    """已拉取到本地的包

    files: 拉取层给出的权威文件列表（相对 root），None 表示需遍历目录
    checksum: 源分发包（tarball）的校验和，git / 本地来源为 None
    """

    identity: PackageIdentity
    root: Path
    files: tuple[str, ...] | None = None
    checksum: str | None = None


@dataclass(frozen=True)
class VendorEntry:
    """一个包在 vendor 目录中的落点"""

    package: ResolvedPackage
    dest_name: str
    dest: Path
    suffixed: bool

    @property
    def identity(self) -> PackageIdentity:
        return self.package.identity


@dataclass
class ChecksumManifest:
    """每个 vendor 包目录下的 .<checksum-file> 内容"""

    package: str | None
    files: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"package": self.package, "files": dict(self.files)}

    @classmethod
    def from_dict(cls, data: dict) -> ChecksumManifest:
        files = data.get("files") or {}
        if not isinstance(files, dict):
            raise ValueError("校验和清单的 files 字段必须是对象")
        return cls(package=data.get("package"), files=dict(files))


# =========================================================================
# 各阶段输出
# =========================================================================


@dataclass(frozen=True)
class CollectedPackages:
    """包收集结果

    packages: 非本地来源的包
    local_paths: 所有本地路径来源的包根目录（即便位于 vendor 目录内也不得删除）
    """

    packages: Mapping[PackageIdentity, ResolvedPackage]
    local_paths: frozenset[Path] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "packages", MappingProxyType(dict(self.packages)))

    def identities(self) -> list[PackageIdentity]:
        return list(self.packages)


@dataclass(frozen=True)
class VersionPlan:
    """版本去重规划

    max_versions: 分组键 -> 该组最高版本
    suffixed: 目标目录名需要带版本后缀的包
    """

    max_versions: Mapping[tuple, str]
    suffixed: frozenset[PackageIdentity]

    def needs_suffix(self, identity: PackageIdentity) -> bool:
        return identity in self.suffixed

    def dest_name(self, identity: PackageIdentity) -> str:
        if self.needs_suffix(identity):
            return f"{identity.name}-{identity.version}"
        return identity.name


@dataclass(frozen=True)
class LayoutPlan:
    """来源布局规划

    roots: 来源 -> 该来源下包的目标根目录
    """

    vendor_dir: Path
    merge_sources: bool
    roots: Mapping[OriginId, Path]

    def root_for(self, origin: OriginId) -> Path:
        return self.roots[origin]

    def origins(self) -> list[OriginId]:
        return sorted(self.roots, key=str)

    def source_dirs(self) -> set[str]:
        """分来源模式下用到的子目录名集合"""
        if self.merge_sources:
            return set()
        return {root.name for root in self.roots.values()}
