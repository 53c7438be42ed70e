"""Git subprocess adapter: the only place blame-split runs git.

Every call returns a QueryResult value; a non-zero exit status is data for the
caller to interpret. Only a missing git executable or a hung git process raise.

// [LAW:locality-or-seam] All subprocess usage isolated here; the navigator sees GitBackend only.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class GitUnavailableError(RuntimeError):
    """git could not be executed at all (missing binary, timeout)."""


@dataclass(frozen=True)
class QueryResult:
    lines: list[str] = field(default_factory=list)
    returncode: int = 0
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def split_lines(text: str) -> list[str]:
    """Split on "\n" only, the way git counts lines; one trailing newline ends the text."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


class GitBackend:
    """Runs git commands inside one repository.

    Args:
        cwd: Directory git runs in (normally the repository toplevel).
        git: Executable name or path.
        timeout: Seconds before a git call is abandoned.
    """

    def __init__(self, cwd: str | None = None, git: str = "git", timeout: float = DEFAULT_TIMEOUT):
        self.cwd = cwd
        self.git = git
        self.timeout = timeout

    def run(self, args: list[str], *, input_text: str | None = None) -> QueryResult:
        cmd = [self.git, *args]
        logger.debug("git %s (cwd=%s)", " ".join(args), self.cwd)
        try:
            proc = subprocess.run(
                cmd,
                cwd=self.cwd,
                input=None if input_text is None else input_text.encode("utf-8"),
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise GitUnavailableError(f"git executable not found: {self.git}") from exc
        except subprocess.TimeoutExpired as exc:
            raise GitUnavailableError(f"git {args[0]} timed out after {self.timeout}s") from exc

        # Bytes mode: no newline translation, so "\r" stays inside its line
        stdout = proc.stdout.decode("utf-8", errors="replace")
        stderr = proc.stderr.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            logger.warning("git %s exited %d: %s", args[0], proc.returncode, stderr.strip())
        return QueryResult(lines=split_lines(stdout), returncode=proc.returncode, stderr=stderr)


    # ─── Queries consumed by the navigator ──────────────────────────────────

    def blame(self, path: str, revision: str | None = None) -> QueryResult:
        """Porcelain blame of path at revision (working tree when None)."""
        args = ["blame", "--porcelain"]
        if revision:
            args.append(revision)
        args.extend(["--", path])
        return self.run(args)

    def blame_contents(self, path: str, lines: list[str]) -> QueryResult:
        """Porcelain blame of unsaved text, attributed against path's history."""
        text = "".join(line + "\n" for line in lines)
        return self.run(["blame", "--porcelain", "--contents", "-", "--", path], input_text=text)

    def show_file(self, path: str, revision: str) -> QueryResult:
        """File content at revision."""
        return self.run(["show", f"{revision}:{path}"])

    def show_commit(self, revision: str) -> QueryResult:
        """Commit header, stat and patch for the detail view."""
        return self.run(["show", "--stat", "--patch", "--no-color", revision])

    def toplevel(self) -> str | None:
        result = self.run(["rev-parse", "--show-toplevel"])
        if not result.ok or not result.lines:
            return None
        return result.lines[0]


def resolve_repo_path(file_path: str) -> tuple[GitBackend, str]:
    """Backend rooted at the file's repository plus the repo-relative path.

    Falls back to the file's directory when it is not inside a repository; the
    first blame will then report git's own error.
    """
    abs_path = os.path.abspath(file_path)
    local = GitBackend(cwd=os.path.dirname(abs_path) or ".")
    root = local.toplevel()
    if root is None:
        return local, os.path.basename(abs_path)
    return GitBackend(cwd=root), os.path.relpath(abs_path, root)
