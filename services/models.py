"""Value types passed between the loader steps."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Overrides:
    project: Optional[str] = None
    bucket: Optional[str] = None
    key: Optional[str] = None

    def is_empty(self) -> bool:
        return not any((self.project, self.bucket, self.key))

    def is_complete(self) -> bool:
        return all((self.project, self.bucket, self.key))


@dataclass(frozen=True)
class Location:
    """A remote object: the bucket and key, plus the project that owns them."""

    project: str
    bucket: str
    key: str

    @property
    def uri(self) -> str:
        return f"gs://{self.bucket}/{self.key}"


@dataclass(frozen=True)
class FetchResult:
    local_path: str
    byte_size: int
    content_hash: Optional[str] = None


@dataclass(frozen=True)
class LaunchSpec:
    executable: str
    args: Tuple[str, ...] = ()
    env: Dict[str, str] = field(default_factory=dict)
    working_dir: Optional[str] = None

    @property
    def argv(self):
        return [self.executable, *self.args]
