"""Shared test fixtures for the transcript_bot test suite.

WHY: Several test modules need the same caption samples and a stand-in
for the external downloader. Centralizing them here keeps the samples
consistent across reconstruct, fetcher, and pipeline tests.

HOW: SRT samples are module constants exposed through fixtures.
FakeRunner replaces ProcessRunner: it records every ProcessSpec and,
instead of launching the downloader, writes the files the downloader
would have written next to the ``-o`` output path.

RULES:
- No test launches the real downloader or talks to a real service
- FakeRunner raises ProcessExecutionFailed when given an exit code
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from transcript_bot.errors import ProcessExecutionFailed
from transcript_bot.process.runner import ProcessResult, ProcessSpec


# ---------------------------------------------------------------------------
# Caption samples
# ---------------------------------------------------------------------------

# Two rolling blocks sharing "hello world"
OVERLAPPING_SRT = """1
00:00:00,000 --> 00:00:02,000
hello world
foo

2
00:00:02,000 --> 00:00:04,000
hello world
bar
"""

# Typical auto-caption rolling window: each block repeats the previous line
ROLLING_SRT = """1
00:00:00,000 --> 00:00:01,500
so today we are going

2
00:00:01,500 --> 00:00:01,510
so today we are going
to talk about rivers

3
00:00:01,510 --> 00:00:03,000
to talk about rivers
and where they come from

4
00:00:03,000 --> 00:00:04,200
and where they come from
"""

# Blocks that never share a line
DISJOINT_SRT = """1
00:00:00,000 --> 00:00:01,000
first line

2
00:00:01,000 --> 00:00:02,000
second line

3
00:00:02,000 --> 00:00:03,000
third line
"""


@pytest.fixture
def overlapping_srt() -> str:
    return OVERLAPPING_SRT


@pytest.fixture
def rolling_srt() -> str:
    return ROLLING_SRT


@pytest.fixture
def disjoint_srt() -> str:
    return DISJOINT_SRT


# ---------------------------------------------------------------------------
# Fake downloader
# ---------------------------------------------------------------------------


def output_path_of(spec: ProcessSpec) -> Path:
    """The path passed to the downloader's ``-o`` option."""
    return Path(spec.command[spec.command.index("-o") + 1])


class FakeRunner:
    """Records ProcessSpecs and writes files in place of the downloader.

    RULES:
    - files: suffix → contents; each is written to ``<output path><suffix>``
    - exit_code: non-zero (or None for a launch failure) raises
      ProcessExecutionFailed after files are written
    """

    def __init__(
        self,
        files: Optional[Dict[str, object]] = None,
        exit_code: Optional[int] = 0,
    ) -> None:
        self.files = files or {}
        self.exit_code = exit_code
        self.specs: List[ProcessSpec] = []
        self.written: List[Path] = []

    def run(self, spec: ProcessSpec, show_logs: bool = True) -> ProcessResult:
        self.specs.append(spec)
        output_path = output_path_of(spec)
        for suffix, content in self.files.items():
            target = output_path.parent / (output_path.name + suffix)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(str(content), encoding="utf-8")
            self.written.append(target)

        if self.exit_code != 0:
            raise ProcessExecutionFailed(self.exit_code, spec.command)
        return ProcessResult(exit_code=0, output=["[download] done"])


@pytest.fixture
def fake_runner_factory():
    """Build FakeRunner instances with per-test files and exit codes."""
    return FakeRunner
