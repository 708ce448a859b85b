from .build_identifier import BuildIdentifier
from .project import Project
from .running_build import ProcessResult, RunningBuild

__all__ = ["BuildIdentifier", "ProcessResult", "Project", "RunningBuild"]
