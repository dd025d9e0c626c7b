"""内容哈希"""

from __future__ import annotations

import hashlib
from pathlib import Path

CHUNK_SIZE = 8192


def sha256_file(path: Path, chunk_size: int = CHUNK_SIZE) -> str:
    """流式计算文件的 SHA-256，返回小写十六进制"""
    sha256 = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
