"""A working copy checked out on the local filesystem."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..value_objects import RepoRef


@dataclass(frozen=True)
class Project:
    """
    Checked-out repository rooted at ``base_dir``.

    Paths passed to the file helpers are relative to the project root.
    """

    base_dir: Path
    id: RepoRef

    @property
    def name(self) -> str:
        return self.id.repo

    def has_file(self, path: str) -> bool:
        return (self.base_dir / path).is_file()

    def read_text(self, path: str) -> Optional[str]:
        target = self.base_dir / path
        if not target.is_file():
            return None
        return target.read_text(encoding="utf-8")

    def write_text(self, path: str, content: str) -> None:
        target = self.base_dir / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    def read_json(self, path: str) -> Optional[Any]:
        content = self.read_text(path)
        if content is None:
            return None
        return json.loads(content)
