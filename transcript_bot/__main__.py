"""Package entry point for ``python -m transcript_bot``.

HOW: Checks sys.argv for the ``--slack`` flag. If present, starts the
Slack bot in Socket Mode. Otherwise, delegates to the CLI's main().

RULES:
- ``--slack`` starts the bot and takes no other arguments
- Without ``--slack``, falls through to the CLI
"""

import sys

if __name__ == "__main__":
    if "--slack" in sys.argv:
        from transcript_bot.slack.bot import main as slack_main
        slack_main()
    else:
        from transcript_bot.cli import main
        main()
