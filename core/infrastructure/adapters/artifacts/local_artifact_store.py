"""
Local Artifact Store.

Copies deployable files into a directory tree keyed by application
name and version.
"""
import asyncio
import logging
from pathlib import Path
import shutil

from core.application.interfaces import IArtifactStore
from core.domain.value_objects import AppInfo, ProjectCredentials


logger = logging.getLogger(__name__)


class LocalArtifactStore(IArtifactStore):
    """Filesystem artifact store returning ``file://`` URLs."""

    def __init__(self, root: str):
        self.root = Path(root)

    async def store_file(
        self, app_info: AppInfo, local_file: str, credentials: ProjectCredentials
    ) -> str:
        source = Path(local_file)
        if not source.is_file():
            raise FileNotFoundError(f"Artifact not found: {local_file}")

        target_dir = self.root / app_info.id.owner / app_info.name / app_info.version
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / source.name
        await asyncio.to_thread(shutil.copy2, source, target)

        logger.info("Stored artifact %s for %s %s", target, app_info.name, app_info.version)
        return target.resolve().as_uri()
