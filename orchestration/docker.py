"""Image publish - login, build, push and announce a container image."""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
import re

from core.application.interfaces import IImageLinkWebhook, IProjectLoader, IVersionStore, ProjectLoadOptions
from core.domain.entities import Project
from core.domain.exceptions import AnnouncementError, VersionNotFoundError
from core.settings.modules.docker_settings import DockerSettings
from delivery_sdk.logging import get_logger

from .models import ExecuteGoal, ExecuteGoalResult, GoalInvocation, failure_on_error
from .pipeline import CommandStep, SubprocessPipeline
from .versioning import read_sdm_version

logger = get_logger("orchestration.docker")

IMAGE_LINK_FAILED = "Image link failed"

# Registries docker resolves by default; never passed to ``docker login``.
DOCKER_HUB_REGISTRIES = frozenset({"docker.io", "index.docker.io"})

_PUNCTUATION = re.compile(r"[^A-Za-z0-9]")


@dataclass(frozen=True)
class DockerOptions:
    """Registry credentials and the Dockerfile path relative to the project root."""

    registry: str
    user: str = ""
    password: str = ""
    dockerfile: str = "Dockerfile"

    @classmethod
    def from_settings(cls, settings: DockerSettings | None = None) -> "DockerOptions":
        settings = settings or DockerSettings()
        return cls(
            registry=settings.registry,
            user=settings.user,
            password=settings.password,
            dockerfile=settings.dockerfile,
        )


@dataclass(frozen=True)
class DockerImageName:
    registry: str
    name: str
    version: str

    @property
    def image(self) -> str:
        return f"{self.registry}/{self.name}:{self.version}"


DockerImageNameCreator = Callable[
    [Project, GoalInvocation, DockerOptions], Awaitable[DockerImageName]
]

# Runs before the image is built; a failing result aborts the goal.
PrepareForGoalExecution = Callable[[Project, GoalInvocation], Awaitable[ExecuteGoalResult]]


def registry_login_args(options: DockerOptions) -> list[str]:
    """
    Arguments for ``docker login``.

    The registry is passed explicitly when it contains punctuation, except for
    Docker Hub which docker logs in to by default.
    """
    args = ["login", "--username", options.user, "--password", options.password]
    registry = options.registry
    if registry.lower() not in DOCKER_HUB_REGISTRIES and _PUNCTUATION.search(registry):
        args.append(registry)
    return args


def default_image_name_creator(version_store: IVersionStore) -> DockerImageNameCreator:
    """Image name from the project name and the persisted build version."""

    async def create(
        project: Project, invocation: GoalInvocation, options: DockerOptions
    ) -> DockerImageName:
        version = await read_sdm_version(version_store, invocation.push, invocation.branch)
        if not version:
            raise VersionNotFoundError(f"No version found for {invocation.id}")
        return DockerImageName(registry=options.registry, name=project.name, version=version)

    return create


def execute_docker_build(
    project_loader: IProjectLoader,
    image_name_creator: DockerImageNameCreator,
    image_link_webhook: IImageLinkWebhook,
    options: DockerOptions,
    preparations: Sequence[PrepareForGoalExecution] = (),
) -> ExecuteGoal:
    """
    Goal that builds and publishes a container image.

    Steps run strictly in order and the first failing step ends the goal with
    its exit code. A published image that cannot be announced fails the goal.
    """

    @failure_on_error("Docker build")
    async def execute(invocation: GoalInvocation) -> ExecuteGoalResult:
        log = invocation.progress_log

        async def build(project: Project) -> ExecuteGoalResult:
            for prepare in preparations:
                prepared = await prepare(project, invocation)
                if not prepared.succeeded:
                    return prepared

            image = (await image_name_creator(project, invocation, options)).image
            pipeline = SubprocessPipeline(
                steps=(
                    CommandStep("login", "docker", tuple(registry_login_args(options)), secrets=(options.password,)),
                    CommandStep("build", "docker", ("build", ".", "-f", options.dockerfile, "-t", image)),
                    CommandStep("push", "docker", ("push", image)),
                )
            )
            result = await pipeline.run(project.base_dir, log)
            if result.error:
                return ExecuteGoalResult.from_process(result)

            try:
                linked = await image_link_webhook.post_image_link(
                    project.id.owner,
                    project.id.repo,
                    project.id.sha,
                    image,
                    invocation.context.team_id,
                )
            except Exception as exc:
                raise AnnouncementError(f"{IMAGE_LINK_FAILED}: {exc}") from exc
            if not linked:
                logger.warning("Image link for %s was not acknowledged", image)
                await log.write(f"{IMAGE_LINK_FAILED} for {image}")
                raise AnnouncementError(IMAGE_LINK_FAILED)

            await log.write(f"Published image {image}")
            return ExecuteGoalResult.success(message=f"Published {image}", target_url=image)

        return await project_loader.with_project(
            ProjectLoadOptions(invocation.credentials, invocation.id, read_only=False),
            build,
        )

    return execute
