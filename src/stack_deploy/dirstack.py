"""
stack_deploy.dirstack — Explicit working-directory stack.

Stages never call os.chdir. Each stage enters its directory through
DirectoryStack.enter() and hands ``stack.current`` to child processes as
their cwd, so the process-wide working directory is never mutated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)


class DirectoryStack:
    """Push/pop stack of directories; the top is the effective cwd."""

    def __init__(self, base: Path) -> None:
        self._stack: list[Path] = [Path(base)]

    @property
    def current(self) -> Path:
        return self._stack[-1]

    @property
    def depth(self) -> int:
        return len(self._stack) - 1

    def push(self, path: Path | str) -> Path:
        target = Path(path)
        if not target.is_absolute():
            target = self.current / target
        if not target.is_dir():
            raise NotADirectoryError(f"Directory not found: {target}")
        self._stack.append(target)
        logger.debug("pushd %s", target)
        return target

    def pop(self) -> Path:
        if len(self._stack) == 1:
            raise RuntimeError("Cannot pop the base directory")
        left = self._stack.pop()
        logger.debug("popd %s -> %s", left, self.current)
        return left

    @contextmanager
    def enter(self, path: Path | str) -> Iterator[Path]:
        """Push ``path`` for the duration of the block; always pops exactly once."""
        target = self.push(path)
        try:
            yield target
        finally:
            self.pop()
