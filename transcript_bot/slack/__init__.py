"""Slack front end: Socket Mode bot for video transcripts and voice notes.

WHY: The transcript pipeline is most useful where links get shared. This
package delivers transcripts, audio transcriptions, and summaries back
into Slack threads.

RULES:
- bot.py holds event/action handlers and background workers
- messages.py holds Block Kit builders (no Slack API calls)
"""
