"""Run external command-line tools with a scrubbed environment.

WHY: Captions and audio are produced by an external downloader that can
run for minutes and print thousands of progress lines. The pipeline
needs a single place that launches such tools, streams their output to
the log, and turns a failing exit code into a typed error.

HOW: ProcessSpec describes one invocation (argument list, working
directory, environment). ProcessRunner.run() starts the process with
stderr merged into stdout, drains the combined stream on a dedicated
reader thread while the process runs, waits for exit, and raises
ProcessExecutionFailed for anything other than exit code 0.

RULES:
- The child environment is exactly ProcessSpec.env, which defaults to
  empty; nothing is inherited from the parent process
- Output is drained concurrently with execution, never after wait(),
  so a full OS pipe buffer cannot stall the child
- Every output line reaches the log sink before run() returns; only the
  last OUTPUT_TAIL_LINES are kept in ProcessResult.output
- A launch failure raises ProcessExecutionFailed with exit_code=None
- Interrupting the wait kills the child and re-raises; nothing is retried
"""

from __future__ import annotations

import logging
import subprocess
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Deque, Dict, List, Optional

from transcript_bot.errors import ProcessExecutionFailed

logger = logging.getLogger(__name__)

OUTPUT_TAIL_LINES = 200
"""Output lines kept in ProcessResult; the log sink still sees every line."""


@dataclass
class ProcessSpec:
    """One external command invocation.

    RULES:
    - command: argument list, program first (absolute path recommended,
      the empty environment has no PATH)
    - cwd: working directory for the child, or None for the parent's
    - env: complete child environment; empty unless variables are added
    """

    command: List[str]
    cwd: Optional[Path] = None
    env: Dict[str, str] = field(default_factory=dict)


@dataclass
class ProcessResult:
    """Outcome of a successful run: exit code and the last output lines."""

    exit_code: int
    output: List[str] = field(default_factory=list)


def _log_line(line: str) -> None:
    logger.debug(line)


class ProcessRunner:
    """Launches ProcessSpecs and maps failures to ProcessExecutionFailed.

    HOW: The log sink is any callable taking one line of text. It
    defaults to this module's logger at DEBUG level; tests pass a
    list.append to collect lines.
    """

    def __init__(self, log_sink: Callable[[str], None] | None = None) -> None:
        self._log_sink = log_sink or _log_line

    def run(self, spec: ProcessSpec, show_logs: bool = True) -> ProcessResult:
        """Run a command to completion.

        RULES:
        - Blocks until the process exits
        - show_logs=False still drains the stream, but skips the sink
        - Returns ProcessResult only for exit code 0

        Args:
            spec: The command, working directory, and environment.
            show_logs: Forward each output line to the log sink.

        Returns:
            ProcessResult with exit code 0 and the last OUTPUT_TAIL_LINES
            output lines.
        """
        logger.info("Running: %s", " ".join(spec.command))
        if spec.cwd is not None:
            logger.info("Working directory: %s", spec.cwd)

        try:
            process = subprocess.Popen(
                spec.command,
                cwd=str(spec.cwd) if spec.cwd is not None else None,
                env=dict(spec.env),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            logger.warning("Could not start %s: %s", spec.command[0], exc)
            raise ProcessExecutionFailed(None, spec.command) from exc

        lines: Deque[str] = deque(maxlen=OUTPUT_TAIL_LINES)
        reader = threading.Thread(
            target=self._drain,
            args=(process.stdout, lines, show_logs),
            name="process-output-reader",
            daemon=True,
        )
        reader.start()

        try:
            exit_code = process.wait()
        except BaseException:
            process.kill()
            raise
        finally:
            reader.join()
            if process.stdout is not None:
                process.stdout.close()

        if exit_code != 0:
            logger.warning("%s failed. Exit code: %d", spec.command[0], exit_code)
            raise ProcessExecutionFailed(exit_code, spec.command)

        logger.debug("%s finished successfully", spec.command[0])
        return ProcessResult(exit_code=exit_code, output=list(lines))

    def _drain(self, stream: Optional[IO[str]], lines: Deque[str], show_logs: bool) -> None:
        if stream is None:
            return
        for raw in stream:
            line = raw.rstrip("\r\n")
            lines.append(line)
            if show_logs:
                self._log_sink(line)
