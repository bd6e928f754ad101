"""Deferred dispatch: run the reword after the ack, deliver via response_url.

RULES:
- The server submits DeferredTasks through an ExecutionHost and never
  awaits their outcome itself
- Delivery is best-effort; failures are logged, never retried
"""

from slack_reword.dispatch.callback import CallbackPoster
from slack_reword.dispatch.dispatcher import DeferredTask, RewordDispatcher
from slack_reword.dispatch.hosts import (
    AfterResponseHost,
    DetachedTaskHost,
    ExecutionHost,
    InlineHost,
    select_execution_host,
)

__all__ = [
    "AfterResponseHost",
    "CallbackPoster",
    "DeferredTask",
    "DetachedTaskHost",
    "ExecutionHost",
    "InlineHost",
    "RewordDispatcher",
    "select_execution_host",
]
