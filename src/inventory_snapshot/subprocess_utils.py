"""Subprocess helpers that attach operation context to failures."""

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


def copied_env_for_git_subprocess() -> dict[str, str]:
    """Copy the current environment with interactive git prompts disabled.

    A credential prompt would otherwise block a non-interactive run forever.
    """
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


def run_subprocess_with_context(
    *,
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    timeout: float | None = None,
    env: Mapping[str, str] | None = None,
    input: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command, raising RuntimeError with context on any failure.

    Args:
        cmd: Command and arguments
        operation_context: Short description of what the command does, used
            in the error message (e.g. "fetch remote 'origin'")
        cwd: Working directory
        timeout: Seconds before the command is killed
        env: Environment for the child process
        input: Text passed on stdin

    Returns:
        The completed process with text stdout and stderr

    Raises:
        RuntimeError: If the command is missing, times out or exits non-zero.
            The message includes the captured stderr.
    """
    logger.debug("Running %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        return subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
            env=dict(env) if env is not None else None,
            input=input,
        )
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        message = f"Failed to {operation_context} (exit code {e.returncode})"
        if stderr:
            message = f"{message}\n{stderr}"
        raise RuntimeError(message) from e
    except subprocess.TimeoutExpired as e:
        raise RuntimeError(f"Failed to {operation_context}: timed out after {timeout}s") from e
    except FileNotFoundError as e:
        raise RuntimeError(f"Failed to {operation_context}: command not found: {cmd[0]}") from e
    except OSError as e:
        raise RuntimeError(f"Failed to {operation_context}: {e}") from e
