"""Pure text-processing core of the transcript pipeline.

WHY: The only algorithmic parts of the bot are caption reconstruction
and chunking. Keeping them free of I/O makes them easy to test with
plain strings.

HOW: reconstruct.py turns rolling SRT captions into prose, chunker.py
cuts prose into word-safe pieces, punctuation.py decides whether prose
needs correcting, prompts.py holds the language-service prompts, and
tempfiles.py names and removes the files the external tools write.

RULES:
- reconstruct, chunker, punctuation and prompts perform no I/O
- tempfiles never raises on deletion failure
"""
