"""Read the repository situation (head commit, branch, tags, dirtiness) with the git CLI."""
from __future__ import annotations

import logging
import os
import subprocess
from typing import Callable, List, Optional, Tuple

from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from versioning.errors import RepositoryError
from versioning.models import RepositorySituation

logger = logging.getLogger(__name__)

# (args, cwd) -> (returncode, stdout)
CommandRunner = Callable[[List[str], str], Tuple[int, str]]


def run_git(args: List[str], cwd: str) -> Tuple[int, str]:
    """Run a git command and return (returncode, stdout).

    Raises:
        RepositoryError: the git executable is missing or timed out.
    """
    command = [Constants.GIT_EXECUTABLE] + args
    with Timer() as t:
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=Constants.GIT_TIMEOUT_SEC,
                check=False,
            )
        except FileNotFoundError as e:
            raise RepositoryError(f"git executable not found: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise RepositoryError(f"'{' '.join(command)}' timed out") from e
    if is_debug_enabled(logger):
        logger.debug(
            "git command",
            extra=extra_context(
                event="git_command",
                component="git",
                action=" ".join(args),
                returncode=result.returncode,
                duration_ms=t.duration_ms(),
            ),
        )
    return result.returncode, result.stdout


class GitSituationProvider:
    """Inspects the repository containing ``path``.

    Args:
        path: Any directory inside the work tree.
        run_command: Replacement for :func:`run_git`, used by tests.
    """

    def __init__(self, path: str, run_command: Optional[CommandRunner] = None):
        self.path = os.path.abspath(path)
        self._run = run_command or run_git

    def _git(self, *args: str) -> Optional[str]:
        returncode, stdout = self._run(list(args), self.path)
        if returncode != 0:
            return None
        return stdout.strip()

    def work_tree_root(self) -> str:
        """Absolute path of the work tree root.

        Raises:
            RepositoryError: ``path`` is not inside a git work tree.
        """
        root = self._git("rev-parse", "--show-toplevel")
        if not root:
            raise RepositoryError(f"{self.path} is not inside a git work tree")
        return root

    def head_commit(self) -> Optional[str]:
        return self._git("rev-parse", "--verify", "-q", "HEAD") or None

    def head_branch(self) -> Optional[str]:
        """Symbolic branch name of HEAD; None when detached."""
        return self._git("symbolic-ref", "-q", "--short", "HEAD") or None

    def head_tags(self) -> List[str]:
        output = self._git("tag", "--points-at", "HEAD")
        if not output:
            return []
        return [line.strip() for line in output.splitlines() if line.strip()]

    def is_dirty(self) -> bool:
        output = self._git("status", "--porcelain")
        return bool(output)

    def situation(self) -> RepositorySituation:
        """Snapshot the repository head.

        A repository without commits reports the all-zero commit id, no
        branch and no tags.

        Raises:
            RepositoryError: not a git work tree or git unavailable.
        """
        self.work_tree_root()
        commit = self.head_commit()
        if commit is None:
            logger.debug("No commit found in %s, using %s", self.path, Constants.NO_COMMIT)
            return RepositorySituation(
                head_commit=Constants.NO_COMMIT,
                head_branch=None,
                head_tags=frozenset(),
                dirty=self.is_dirty(),
            )
        return RepositorySituation(
            head_commit=commit,
            head_branch=self.head_branch(),
            head_tags=frozenset(self.head_tags()),
            dirty=self.is_dirty(),
        )
