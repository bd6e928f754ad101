"""Command-line interface for the Slack Reword service.

WHY: Operators need to start the webhook server, check that the model
call works with the deployed credentials, and send hand-signed requests
at a running server while debugging a Slack app configuration.

HOW: argparse with three subcommands:
  serve: run the FastAPI app under uvicorn
  reword: call the transform directly and print the result
  sign: print the Slack signature headers for a request body

RULES:
- Status and timing output goes to stderr; results go to stdout
- The reword command exits 1 on any transform failure
- Logging is configured here, once, for every subcommand
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from typing import List, Optional

from slack_reword.config import DEFAULT_HOST, DEFAULT_PORT, load_signing_secret
from slack_reword.slack.verification import compute_slack_signature
from slack_reword.transform.client import AnthropicRewordClient


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_serve(args: argparse.Namespace) -> int:
    from slack_reword.server.app import run_api

    run_api(host=args.host, port=args.port)
    return 0


async def _reword(message: str, model: Optional[str]) -> str:
    async with AnthropicRewordClient(model=model) as client:
        return await client.reword(message)


def _cmd_reword(args: argparse.Namespace) -> int:
    message = args.message.strip()
    if not message:
        _status("Nothing to reword: message is empty.")
        return 1

    _status("Rewording {} characters...".format(len(message)))
    t0 = time.monotonic()
    try:
        reworded = asyncio.run(_reword(message, args.model))
    except Exception as exc:
        _status("Error: {}".format(exc))
        return 1

    _status("Done in {:.1f}s".format(time.monotonic() - t0))
    print(reworded)
    return 0


def _cmd_sign(args: argparse.Namespace) -> int:
    secret = args.secret or load_signing_secret()
    if not secret:
        _status("No signing secret: pass --secret or set SLACK_SIGNING_SECRET.")
        return 1

    timestamp = args.timestamp or str(int(time.time()))
    signature = compute_slack_signature(secret, timestamp, args.body)
    print("X-Slack-Request-Timestamp: {}".format(timestamp))
    print("X-Slack-Signature: {}".format(signature))
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - A subcommand is required
    - --verbose applies to every subcommand
    """
    parser = argparse.ArgumentParser(
        prog="slack-reword",
        description="Webhook server and tools for the /reword Slack command.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the webhook server.")
    serve.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help="Interface to bind (default: %(default)s).",
    )
    serve.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help="Port to listen on (default: %(default)s).",
    )
    serve.set_defaults(func=_cmd_serve)

    reword = subparsers.add_parser("reword", help="Reword a message with the model and print it.")
    reword.add_argument("message", help="The message to reword.")
    reword.add_argument(
        "--model",
        default=None,
        help="Model to use (default: chosen by message length).",
    )
    reword.set_defaults(func=_cmd_reword)

    sign = subparsers.add_parser("sign", help="Print Slack signature headers for a request body.")
    sign.add_argument(
        "--body",
        required=True,
        help="The exact url-encoded request body, e.g. 'text=hi&response_url=...'.",
    )
    sign.add_argument(
        "--timestamp",
        default=None,
        help="Epoch seconds to sign with (default: now).",
    )
    sign.add_argument(
        "--secret",
        default=None,
        help="Signing secret (default: SLACK_SIGNING_SECRET).",
    )
    sign.set_defaults(func=_cmd_sign)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m slack_reword`` and ``slack-reword``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
