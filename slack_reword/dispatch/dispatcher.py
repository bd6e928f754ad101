"""Deferred reword task: transform the text, post the outcome to Slack.

WHY: The model call can take far longer than Slack's three-second window,
so it runs after the command has been acknowledged. Whatever the outcome,
the user must get exactly one terminal message on the response_url,
never silence.

HOW: The handler builds a DeferredTask (a frozen copy of the text and
callback URL) and submits RewordDispatcher.run to the execution host.
run() resolves the task to a single message dict, then hands it to the
CallbackPoster, which swallows and logs delivery failures.

RULES:
- run() never raises (asyncio cancellation aside)
- Exactly one post per task
- The transform call is bounded by timeout_s; expiry posts a failure
- Failure text is "Error: <description>" and never echoes the original
  message in the text field
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from slack_reword.config import TRANSFORM_TIMEOUT_S
from slack_reword.dispatch.callback import CallbackPoster
from slack_reword.errors import TransformTimeoutError
from slack_reword.slack.messages import build_error_response, build_success_response
from slack_reword.transform.base import BaseTransformer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeferredTask:
    """One accepted command's deferred work.

    RULES:
    - Created once per accepted request, never mutated
    - text is already stripped and non-empty
    """

    request_id: str
    text: str
    callback_url: str


def new_request_id() -> str:
    """Short random id tying a request's log lines together."""
    return uuid.uuid4().hex[:8]


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class RewordDispatcher:
    """Runs DeferredTasks against a transformer and a callback poster."""

    def __init__(
        self,
        transformer: BaseTransformer,
        poster: CallbackPoster,
        timeout_s: float = TRANSFORM_TIMEOUT_S,
    ) -> None:
        self._transformer = transformer
        self._poster = poster
        self._timeout_s = timeout_s

    async def dispatch(self, callback_url: str, text: str, request_id: Optional[str] = None) -> None:
        """Reword ``text`` and post the outcome to ``callback_url``."""
        task = DeferredTask(
            request_id=request_id or new_request_id(),
            text=text,
            callback_url=callback_url,
        )
        await self.run(task)

    async def run(self, task: DeferredTask) -> None:
        logger.info("[%s] bg_start transformer=%s", task.request_id, self._transformer.name)
        message = await self._resolve(task)
        delivered = await self._poster.post(task.callback_url, message, request_id=task.request_id)
        logger.info("[%s] bg_done delivered=%s", task.request_id, delivered)

    async def _resolve(self, task: DeferredTask) -> Dict[str, Any]:
        """Turn a task into its one terminal message."""
        try:
            try:
                reworded = await asyncio.wait_for(
                    self._transformer.reword(task.text),
                    timeout=self._timeout_s,
                )
            except asyncio.TimeoutError:
                raise TransformTimeoutError(
                    "Rewording timed out after {:g}s".format(self._timeout_s)
                ) from None
            return build_success_response(task.text, reworded)
        except Exception as exc:
            logger.exception("[%s] bg_err", task.request_id)
            return build_error_response("Error: {}".format(_describe(exc)))
