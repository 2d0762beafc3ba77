from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Optional, Protocol
from urllib.parse import urlparse

from app.core.config import settings

EVIDENCE_PREFIX = 'evidence'


@dataclass(frozen=True)
class EvidenceFile:
    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        suffix = PurePosixPath(self.filename).suffix.lstrip('.')
        return suffix.lower() or 'bin'


class EvidenceStorage(Protocol):
    def put(self, path: str, data: bytes, content_type: Optional[str] = None) -> str: ...

    def public_url(self, path: str) -> str: ...

    def delete(self, path: str) -> None: ...


def evidence_path(report_id: str, evidence: EvidenceFile) -> str:
    return f"{EVIDENCE_PREFIX}/{report_id}.{evidence.extension}"


def evidence_path_from_url(url: str) -> str:
    """Storage path for a URL returned by ``put``; only the file name is kept."""
    name = PurePosixPath(urlparse(url).path).name
    return f"{EVIDENCE_PREFIX}/{name}"


class LocalEvidenceStorage:
    """Stores evidence below a directory that the app serves as static files."""

    def __init__(self, root: Path, base_url: str) -> None:
        self._root = root
        self._base_url = base_url.rstrip('/')

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, path: str) -> Path:
        target = (self._root / path).resolve()
        if self._root.resolve() not in target.parents:
            raise ValueError(f'Invalid storage path: {path}')
        return target

    def put(self, path: str, data: bytes, content_type: Optional[str] = None) -> str:
        target = self._resolve(path)
        if target.exists():
            raise FileExistsError(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return self.public_url(path)

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def delete(self, path: str) -> None:
        self._resolve(path).unlink(missing_ok=True)


@lru_cache
def get_evidence_storage() -> EvidenceStorage:
    return LocalEvidenceStorage(Path(settings.EVIDENCE_DIR).expanduser(), settings.EVIDENCE_PUBLIC_URL)


def reset_evidence_storage() -> None:
    get_evidence_storage.cache_clear()
