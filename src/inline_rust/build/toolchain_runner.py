"""Toolchain Runner.

This module runs rustc/cargo as subprocesses and reports exactly what they
did: exit status, standard output and standard error.

Design:
    - Blocking: run() returns only after the child exits (no timeout)
    - Output is captured as UTF-8 text, undecodable bytes replaced
    - On KeyboardInterrupt the whole child process tree (cargo spawns rustc
      and build scripts) is terminated before the interrupt is re-raised
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import psutil


@dataclass
class ProcessResult:
    """Captured result of one toolchain invocation."""

    command: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ToolchainRunner:
    """Runs toolchain commands and captures their output."""

    def __init__(self, cwd: Optional[Path] = None):
        """Initialize runner.

        Args:
            cwd: Working directory for child processes (default: inherit)
        """
        self.cwd = cwd

    def run(self, command: Sequence[str]) -> ProcessResult:
        """Run a command to completion.

        Args:
            command: Program and arguments

        Returns:
            ProcessResult with exit status and captured streams

        Raises:
            FileNotFoundError: If the program doesn't exist
        """
        cmd = [str(arg) for arg in command]
        logging.info(f"Running: {shlex.join(cmd)}")

        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            cwd=str(self.cwd) if self.cwd else None,
        )
        try:
            stdout, stderr = proc.communicate()
        except KeyboardInterrupt:
            terminate_process_tree(proc.pid)
            raise

        logging.debug(f"{cmd[0]} exited with code {proc.returncode}")
        return ProcessResult(
            command=cmd,
            returncode=proc.returncode,
            stdout=stdout or "",
            stderr=stderr or "",
        )


def terminate_process_tree(root_pid: int, timeout: float = 3) -> int:
    """Terminate a process and all of its descendants.

    Children are terminated before parents; anything still alive after
    ``timeout`` seconds is killed.

    Args:
        root_pid: PID of the root process
        timeout: Grace period before force killing

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(root_pid)
        procs = [root] + root.children(recursive=True)
    except psutil.NoSuchProcess:
        return 0

    signalled: list[psutil.Process] = []
    for proc in reversed(procs):
        try:
            proc.terminate()
            signalled.append(proc)
            logging.debug(f"Terminated process {proc.pid}")
        except psutil.NoSuchProcess:
            pass  # Already dead

    _gone, alive = psutil.wait_procs(signalled, timeout=timeout)
    for proc in alive:
        try:
            proc.kill()
            logging.warning(f"Force killed stubborn process {proc.pid}")
        except psutil.NoSuchProcess:
            pass

    return len(signalled)
