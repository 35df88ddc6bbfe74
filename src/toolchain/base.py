"""
Base Protocol and Types for External Tool Invocation.

Defines the interface every command runner implements, so stages can be
exercised with a fake runner instead of shelling out.
Uses Python's Protocol for structural subtyping (duck typing with type hints).

Usage
-----
    from toolchain.base import SubprocessRunner

    runner = SubprocessRunner()
    result = runner.run(['vite', 'build'], cwd=project_root)
    if not result.ok:
        print(result.stderr)
"""
from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable


class ToolNotFoundError(RuntimeError):
    """Raised when an external tool is not on the execution path."""


@dataclass
class CommandResult:
    """
    Outcome of one external tool invocation.

    Attributes
    ----------
    args : list[str]
        Command and arguments that were run
    returncode : int
        Process exit status
    stdout : str
        Captured standard output ('' when streamed to the console)
    stderr : str
        Captured standard error ('' when streamed to the console)
    """

    args: list[str]
    returncode: int
    stdout: str = ''
    stderr: str = ''

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        return ' '.join(str(a) for a in self.args)

    def error_output(self) -> str:
        """Best available description of why the command failed."""
        output = self.stderr.strip() or self.stdout.strip()
        return output or f"'{self.command}' exited with status {self.returncode}"


@runtime_checkable
class CommandRunner(Protocol):
    """
    Protocol defining how external tools are invoked.

    Methods
    -------
    run(args, cwd, env, capture)
        Run a command to completion and report its outcome.
    """

    def run(
        self,
        args: list[str],
        cwd: Optional[Path] = None,
        env: Optional[dict] = None,
        capture: bool = False,
    ) -> CommandResult:
        """
        Run a command and block until it exits.

        Parameters
        ----------
        args : list[str]
            Command and arguments
        cwd : Path, optional
            Working directory
        env : dict, optional
            Full environment for the child process
        capture : bool
            Capture output instead of forwarding it to the console

        Returns
        -------
        CommandResult

        Raises
        ------
        ToolNotFoundError
            If the executable cannot be found
        """
        ...


class SubprocessRunner:
    """
    Command runner backed by ``subprocess.run``.

    There is no timeout: a hung tool hangs the build.
    """

    def run(
        self,
        args: list[str],
        cwd: Optional[Path] = None,
        env: Optional[dict] = None,
        capture: bool = False,
    ) -> CommandResult:
        args = [str(a) for a in args]
        try:
            result = subprocess.run(
                args,
                cwd=cwd,
                env=env,
                capture_output=capture,
                encoding='utf-8',
                errors='replace',
            )
        except FileNotFoundError:
            raise ToolNotFoundError(f"Command not found: {args[0]}")

        stdout = result.stdout or ''
        stderr = result.stderr or ''
        # Captured output is still shown to the operator, just not parsed
        if capture:
            if stdout:
                sys.stdout.write(stdout)
            if stderr:
                sys.stderr.write(stderr)

        return CommandResult(
            args=args,
            returncode=result.returncode,
            stdout=stdout,
            stderr=stderr,
        )
