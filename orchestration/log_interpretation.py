"""Log interpretation - pulling the relevant part out of a failed build log."""

from collections.abc import Callable
from dataclasses import dataclass
import re


@dataclass(frozen=True)
class InterpretedLog:
    """Diagnosis of a build log."""

    relevant_part: str
    message: str
    include_full_log: bool = False


LogInterpreter = Callable[[str], InterpretedLog | None]


def tail_log_interpreter(message: str = "Build failed", lines: int = 20) -> LogInterpreter:
    """Interpreter that reports the last ``lines`` lines of the log."""

    def interpret(log: str) -> InterpretedLog | None:
        if not log:
            return None
        return InterpretedLog(
            relevant_part="\n".join(log.splitlines()[-lines:]),
            message=message,
        )

    return interpret


_NPM_ERROR = re.compile(r"^npm ERR!.*$", re.MULTILINE)


def npm_log_interpreter(log: str) -> InterpretedLog | None:
    """Collect ``npm ERR!`` lines, falling back to the log tail."""
    errors = _NPM_ERROR.findall(log or "")
    if errors:
        return InterpretedLog(
            relevant_part="\n".join(errors),
            message="npm reported errors",
        )
    return tail_log_interpreter("Node build failed")(log)
