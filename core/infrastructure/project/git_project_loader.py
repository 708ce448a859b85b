"""
Git Project Loader.

Scoped access to working copies cloned from the remote repository.

Access model:
- Read-only callers share one checkout per (repository, sha). The checkout is
  removed when its last reader leaves.
- Writers get a private clone and are serialized per (repository, sha), so
  no two writers touch the same working copy state at once.
"""
import asyncio
from dataclasses import dataclass, field
import logging
from pathlib import Path
import shutil
import tempfile
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar

from core.application.interfaces import IProgressLog, IProjectLoader, ProjectLoadOptions
from core.domain.entities import ProcessResult, Project
from core.domain.exceptions import ProjectAccessError
from core.domain.value_objects import ProjectCredentials, RepoRef
from core.infrastructure.logs.progress_logs import LoggingProgressLog
from core.infrastructure.process import spawn_and_watch
from core.settings.modules.delivery_settings import ProjectSettings


logger = logging.getLogger(__name__)

T = TypeVar("T")

CheckoutKey = Tuple[str, str, str]


@dataclass
class _SharedCheckout:
    """A read-only checkout and the number of readers using it."""

    ready: asyncio.Future
    readers: int = 0
    path: Optional[Path] = None


@dataclass
class _WriterSlot:
    """Serializes writers of one key; dropped when nobody holds or awaits it."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


@dataclass
class _CheckoutRegistry:
    shared: Dict[CheckoutKey, _SharedCheckout] = field(default_factory=dict)
    writers: Dict[CheckoutKey, _WriterSlot] = field(default_factory=dict)


class GitProjectLoader(IProjectLoader):
    """Clones repositories with the ``git`` CLI."""

    def __init__(
        self,
        settings: Optional[ProjectSettings] = None,
        log: Optional[IProgressLog] = None,
    ):
        """
        Args:
            settings: Workspace root and clone depth
            log: Progress log for git output (Python logger by default)
        """
        self.settings = settings or ProjectSettings()
        self._log = log or LoggingProgressLog("git", "debug")
        self._registry = _CheckoutRegistry()

    async def with_project(
        self,
        options: ProjectLoadOptions,
        body: Callable[[Project], Awaitable[T]],
    ) -> T:
        key = self._key(options.repo_ref)
        if options.read_only:
            return await self._with_shared(key, options, body)
        return await self._with_exclusive(key, options, body)

    # =========================================================================
    # READ-ONLY ACCESS
    # =========================================================================

    async def _with_shared(self, key, options, body):
        entry = self._registry.shared.get(key)
        if entry is None:
            entry = _SharedCheckout(ready=asyncio.get_running_loop().create_future())
            self._registry.shared[key] = entry
            try:
                entry.path = await self._clone(options.repo_ref, options.credentials)
                entry.ready.set_result(entry.path)
            except Exception as e:
                del self._registry.shared[key]
                entry.ready.set_exception(e)
                # Readers already waiting re-raise it from the future
                entry.ready.exception()
                raise
            except BaseException:
                del self._registry.shared[key]
                entry.ready.cancel()
                raise

        entry.readers += 1
        try:
            path = await asyncio.shield(entry.ready)
            return await body(Project(base_dir=path, id=options.repo_ref))
        finally:
            entry.readers -= 1
            if entry.readers == 0 and self._registry.shared.get(key) is entry:
                del self._registry.shared[key]
                if entry.path is not None:
                    self._remove(entry.path)

    # =========================================================================
    # EXCLUSIVE ACCESS
    # =========================================================================

    async def _with_exclusive(self, key, options, body):
        slot = self._registry.writers.get(key)
        if slot is None:
            slot = self._registry.writers[key] = _WriterSlot()
        slot.users += 1
        try:
            async with slot.lock:
                path = await self._clone(options.repo_ref, options.credentials)
                try:
                    return await body(Project(base_dir=path, id=options.repo_ref))
                finally:
                    self._remove(path)
        finally:
            slot.users -= 1
            if slot.users == 0 and self._registry.writers.get(key) is slot:
                del self._registry.writers[key]

    # =========================================================================
    # GIT
    # =========================================================================

    async def _clone(self, repo_ref: RepoRef, credentials: ProjectCredentials) -> Path:
        root = self.settings.workspace_root
        if root:
            Path(root).mkdir(parents=True, exist_ok=True)
        target = Path(tempfile.mkdtemp(prefix=f"{repo_ref.repo}-", dir=root))
        url = self._authenticated_url(repo_ref, credentials)

        result = await spawn_and_watch(
            "git",
            [
                "clone",
                "--depth",
                str(self.settings.clone_depth),
                "--branch",
                repo_ref.branch,
                url,
                str(target),
            ],
            cwd=target.parent,
            log=self._log,
            secrets=[credentials.token],
        )
        if result.code == 0:
            result = await self._checkout(target, repo_ref.sha, [credentials.token])
        if result.code != 0:
            self._remove(target)
            raise ProjectAccessError(
                f"Unable to check out {repo_ref}: {result.message}"
            )

        logger.info("Checked out %s into %s", repo_ref, target)
        return target

    async def _checkout(self, target: Path, sha: str, secrets: List[str]) -> ProcessResult:
        result = await spawn_and_watch("git", ["checkout", sha], cwd=target, log=self._log)
        if result.code == 0:
            return result
        # The commit is older than the shallow clone reaches
        logger.info("%s not within clone depth, fetching it directly", sha)
        result = await spawn_and_watch(
            "git",
            ["fetch", "--depth", "1", "origin", sha],
            cwd=target,
            log=self._log,
            secrets=secrets,
        )
        if result.code != 0:
            return result
        return await spawn_and_watch("git", ["checkout", sha], cwd=target, log=self._log)

    @staticmethod
    def _authenticated_url(repo_ref: RepoRef, credentials: ProjectCredentials) -> str:
        url = repo_ref.clone_url
        if credentials.token and url.startswith("https://"):
            return url.replace("https://", f"https://x-access-token:{credentials.token}@", 1)
        return url

    @staticmethod
    def _remove(path: Path) -> None:
        shutil.rmtree(path, ignore_errors=True)
        logger.debug("Removed working copy %s", path)

    @staticmethod
    def _key(repo_ref: RepoRef) -> CheckoutKey:
        return (repo_ref.provider_id, repo_ref.slug, repo_ref.sha)
