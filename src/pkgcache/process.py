"""External command execution with live output forwarding."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pkgcache.observability import StructuredLogger


@dataclass(frozen=True, slots=True)
class ProcessResult:
    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        return " ".join(self.argv)


class CommandRunner(Protocol):
    def run(
        self,
        argv: Sequence[str],
        *,
        logger: StructuredLogger,
        cwd: Path | None = None,
        inherit_stdout: bool = False,
    ) -> ProcessResult:
        """Run *argv* to completion, forwarding its output to *logger*."""


@dataclass(frozen=True, slots=True)
class SubprocessRunner:
    """Spawn the command and stream its output while waiting for it to exit.

    With ``inherit_stdout`` the child writes straight to this process's
    stdout and only stderr is piped to the logger.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        logger: StructuredLogger,
        cwd: Path | None = None,
        inherit_stdout: bool = False,
    ) -> ProcessResult:
        command = tuple(argv)
        process = subprocess.Popen(
            list(command),
            cwd=str(cwd) if cwd is not None else None,
            stdin=subprocess.DEVNULL,
            stdout=None if inherit_stdout else subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        piped = logger.pipe_process_output(process.stdout, process.stderr)
        returncode = process.wait()
        piped.join()
        return ProcessResult(
            argv=command,
            returncode=returncode,
            stdout=piped.stdout,
            stderr=piped.stderr,
        )
