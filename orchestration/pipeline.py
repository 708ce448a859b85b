"""Subprocess pipeline - ordered external commands, stopping at the first failure."""

from dataclasses import dataclass
from pathlib import Path

from core.application.interfaces import IProgressLog
from core.domain.entities import ProcessResult
from core.infrastructure.process import ErrorFinder, spawn_and_watch


@dataclass(frozen=True)
class CommandStep:
    """A single external command."""

    name: str
    command: str
    args: tuple[str, ...] = ()
    secrets: tuple[str, ...] = ()


@dataclass(frozen=True)
class SubprocessPipeline:
    """
    Runs steps in order against one working directory.

    The first step whose process fails ends the pipeline; its result is the
    pipeline's result. No retries.
    """

    steps: tuple[CommandStep, ...]
    error_finder: ErrorFinder | None = None

    async def run(self, cwd: str | Path, log: IProgressLog) -> ProcessResult:
        result = ProcessResult(code=0)
        for step in self.steps:
            result = await spawn_and_watch(
                step.command,
                list(step.args),
                cwd=cwd,
                log=log,
                error_finder=self.error_finder,
                secrets=step.secrets,
            )
            if result.code != 0:
                await log.write(f"Step '{step.name}' failed, skipping remaining steps")
                return result
        return result
