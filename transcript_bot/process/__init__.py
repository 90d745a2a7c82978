"""External process execution for the caption and audio tools.

WHY: Both fetchers shell out to the same downloader with the same
isolation rules. Keeping the launch logic in one runner class lets tests
swap in a fake that writes the files the real tool would write.

RULES:
- All subprocesses go through ProcessRunner (no direct subprocess usage elsewhere)
- Environment and working directory are explicit ProcessSpec fields
"""

from transcript_bot.process.runner import ProcessResult, ProcessRunner, ProcessSpec

__all__ = ["ProcessResult", "ProcessRunner", "ProcessSpec"]
