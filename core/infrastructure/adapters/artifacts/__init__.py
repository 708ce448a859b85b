from .local_artifact_store import LocalArtifactStore

__all__ = ["LocalArtifactStore"]
