# Repokeeper Git Runner
# Async git command execution

import asyncio
import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Optional

from repokeeper.git.errors import ConflictDetail, ErrorKind, GitError
from repokeeper.git.parsers import parse_conflicts

logger = logging.getLogger("repokeeper.git")

# Parsers match git's untranslated messages
_GIT_ENV_OVERRIDES = {"LC_ALL": "C"}

# "Receiving objects:  45% (9/20)" and "Rebasing (1/2)" progress meters
_PROGRESS_RE = re.compile(r"^(?:[A-Z][\w ]+: +\d+% \(\d+/\d+\)|Rebasing \(\d+/\d+\))")
# " * branch  main -> FETCH_HEAD", "   1a2b..3c4d  main -> origin/main"
_FETCH_REF_RE = re.compile(r"^(?:\*|[0-9a-f]{4,}\.\.\.?[0-9a-f]{4,}|\+ [0-9a-f]{4,}\.\.\.[0-9a-f]{4,})\s.*->")


def _clean_lines(text: str) -> list[str]:
    """Drop progress meters, hints and fetch ref updates from git output."""
    lines: list[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("hint:") or line.startswith("From "):
            continue
        if _PROGRESS_RE.match(line) or _FETCH_REF_RE.match(line):
            continue
        lines.append(line)
    return lines


def _failure_message(cmd: list[str], stdout: str, stderr: str, conflict: Optional[ConflictDetail] = None) -> str:
    """
    Pick the message git itself reported for a failed command.

    Conflicts are reported on stdout, so their message leads with it;
    other failures use stderr, falling back to stdout.
    """
    if conflict is not None:
        lines = _clean_lines(stdout) + _clean_lines(stderr)
    else:
        lines = _clean_lines(stderr) or _clean_lines(stdout)
    if lines:
        return "\n".join(lines)
    if stderr or stdout:
        return stderr or stdout
    return f"Git command failed: {' '.join(cmd)}"


async def _communicate(process: asyncio.subprocess.Process) -> tuple[bytes, bytes]:
    """Wait for git, killing it if the calling task is cancelled."""
    try:
        return await process.communicate()
    except asyncio.CancelledError:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise


async def _run_git(
    *args: str,
    cwd: Optional[Path] = None,
    check: bool = True,
    binary: str = "git",
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command without blocking the event loop.

    Args:
        *args: Git command arguments.
        cwd: Working directory.
        check: Whether to raise on non-zero exit.
        binary: Git executable to invoke.

    Returns:
        CompletedProcess with decoded stdout/stderr.

    Raises:
        GitError: If the command fails and check is True, or git is missing.
    """
    cmd = [binary, *args]
    logger.debug("%s (cwd=%s)", " ".join(cmd), cwd)
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, **_GIT_ENV_OVERRIDES},
        )
    except FileNotFoundError:
        raise GitError(
            f"{binary} command not found. Is git installed?",
            kind=ErrorKind.GIT_NOT_FOUND,
            command=cmd,
            returncode=127,
        )

    raw_out, raw_err = await _communicate(process)
    stdout = raw_out.decode("utf-8", errors="replace") if raw_out else ""
    stderr = raw_err.decode("utf-8", errors="replace") if raw_err else ""
    result = subprocess.CompletedProcess(cmd, process.returncode, stdout=stdout, stderr=stderr)

    if check and result.returncode != 0:
        out, err = stdout.strip(), stderr.strip()
        conflict = parse_conflicts(f"{out}\n{err}")
        raise GitError(
            _failure_message(cmd, out, err, conflict),
            kind=ErrorKind.CONFLICT if conflict else ErrorKind.COMMAND_FAILED,
            command=cmd,
            returncode=result.returncode,
            stdout=out,
            stderr=err,
            conflict=conflict,
        )
    return result
