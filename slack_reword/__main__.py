"""Package entry point for ``python -m slack_reword``.

WHY: Operators run the webhook server as ``python -m slack_reword serve``
and debug the model call as ``python -m slack_reword reword "..."``.

HOW: Delegates to the CLI's main() function.
"""

from slack_reword.cli import main

if __name__ == "__main__":
    main()
