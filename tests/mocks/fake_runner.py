"""Recording stand-in for CommandRunner.

Records every invocation as an argv list (with its cwd) and answers from
scripted results keyed by the argv prefix, so tests can drive terraform /
npm / aws behaviour without any of those tools installed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from stack_deploy.exceptions import ExecutionFailure
from stack_deploy.models import CommandInvocation
from stack_deploy.runner import CommandRunner


@dataclass
class RecordedCall:
    argv: list[str]
    cwd: Path
    captured: bool


@dataclass
class RecordingRunner(CommandRunner):
    outputs: dict[tuple[str, ...], str] = field(default_factory=dict)
    exit_codes: dict[tuple[str, ...], int] = field(default_factory=dict)
    errors: dict[tuple[str, ...], Exception] = field(default_factory=dict)
    missing: set[str] = field(default_factory=set)
    calls: list[RecordedCall] = field(default_factory=list)

    def resolve(self, program: str, *, cwd: Path | None = None) -> str | None:
        return None if program in self.missing else f"/usr/bin/{program}"

    def _lookup(self, table: dict, argv: list[str]):
        # Longest matching prefix wins.
        for size in range(len(argv), 0, -1):
            key = tuple(argv[:size])
            if key in table:
                return table[key]
        return None

    def _dispatch(self, invocation: CommandInvocation, cwd: Path, captured: bool) -> None:
        argv = invocation.argv
        self.calls.append(RecordedCall(argv=argv, cwd=Path(cwd), captured=captured))
        error = self._lookup(self.errors, argv)
        if error is not None:
            raise error
        code = self._lookup(self.exit_codes, argv) or 0
        if code != 0:
            raise ExecutionFailure(message=invocation.message, exit_code=code)

    def run(self, invocation: CommandInvocation, *, cwd: Path) -> None:
        self._dispatch(invocation, cwd, captured=False)

    def capture(
        self,
        invocation: CommandInvocation,
        *,
        cwd: Path,
        combine_stderr: bool = False,
    ) -> str:
        self._dispatch(invocation, cwd, captured=True)
        return self._lookup(self.outputs, invocation.argv) or ""

    @property
    def argvs(self) -> list[list[str]]:
        return [call.argv for call in self.calls]

    def ran(self, *prefix: str) -> bool:
        return any(tuple(argv[: len(prefix)]) == prefix for argv in self.argvs)
