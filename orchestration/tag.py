"""Tagging - source control tags for built versions."""

from delivery_sdk.logging import get_logger
from delivery_sdk.utils.datetime import utc_now

from core.application.interfaces import ITagClient, IProjectLoader, IVersionStore, ProjectLoadOptions
from core.domain.entities import Project
from core.domain.exceptions import VersionNotFoundError
from core.domain.value_objects import ProjectCredentials, PushMetadata, RepoRef, Tag, Tagger
from core.settings.modules.delivery_settings import TaggingSettings

from .models import ExecuteGoal, ExecuteGoalResult, GoalInvocation, failure_on_error

logger = get_logger("orchestration.tag")


class BuildTagger:
    """Creates annotated tags with the configured tagger identity."""

    def __init__(
        self,
        tag_client: ITagClient,
        version_store: IVersionStore,
        settings: TaggingSettings | None = None,
    ) -> None:
        self._tag_client = tag_client
        self._version_store = version_store
        self._settings = settings or TaggingSettings()

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    def build_tag(self, name: str, sha: str, message: str) -> Tag:
        return Tag(
            tag=name,
            message=message,
            object=sha,
            tagger=Tagger(
                name=self._settings.tagger_name,
                email=self._settings.tagger_email,
                date=utc_now(),
            ),
        )

    async def create_tag_for_status(
        self,
        credentials: ProjectCredentials,
        repo_ref: RepoRef,
        name: str,
        message: str,
    ) -> Tag:
        """Create the tag object and its reference. Not idempotent."""
        tag = self.build_tag(name, repo_ref.sha, message)
        await self._tag_client.create_tag(credentials, repo_ref, tag)
        await self._tag_client.create_tag_reference(credentials, repo_ref, tag)
        logger.info("Created tag %s on %s", tag.tag, repo_ref)
        return tag

    async def read_version(self, push: PushMetadata, branch: str) -> str | None:
        return await self._version_store.read_version(
            push.owner, push.name, push.provider_id, push.sha, branch
        )

    async def create_build_tag(
        self,
        credentials: ProjectCredentials,
        repo_ref: RepoRef,
        push: PushMetadata,
        build_no: str,
    ) -> Tag | None:
        """
        Tag a successful build as ``<version>+<prefix>.<build_no>``.

        Returns None when tagging is disabled or no version was persisted for
        the commit.
        """
        if not self.enabled:
            return None
        version = await self.read_version(push, repo_ref.branch)
        if not version:
            logger.info("No version persisted for %s, skipping build tag", repo_ref)
            return None
        name = f"{version}+{self._settings.build_suffix_prefix}.{build_no}"
        return await self.create_tag_for_status(credentials, repo_ref, name, "Tag created by SDM")


def execute_tag(project_loader: IProjectLoader, tagger: BuildTagger) -> ExecuteGoal:
    """Goal that tags the commit with its persisted version."""

    @failure_on_error("Tag")
    async def execute(invocation: GoalInvocation) -> ExecuteGoalResult:
        async def tag_project(project: Project) -> Tag:
            version = await tagger.read_version(invocation.push, invocation.branch)
            if not version:
                raise VersionNotFoundError(f"No version found for {invocation.id}")
            return await tagger.create_tag_for_status(
                invocation.credentials,
                project.id,
                version,
                invocation.push.commit_message or f"Version {version}",
            )

        tag = await project_loader.with_project(
            ProjectLoadOptions(invocation.credentials, invocation.id, read_only=True),
            tag_project,
        )
        await invocation.progress_log.write(f"Created tag {tag.tag}")
        return ExecuteGoalResult.success(message=f"Created tag {tag.tag}")

    return execute
