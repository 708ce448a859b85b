from .build_status import BuildPhase, BuildStatus

__all__ = ["BuildPhase", "BuildStatus"]
