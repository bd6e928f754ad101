"""Execution hosts: how deferred work is run relative to the HTTP response.

WHY: Deployment targets differ in what they offer for work that outlives
a request. Some run a callable after the response and wait for it to
finish; some only allow a detached task the process may abandon; some
offer nothing, so the work must finish before the response is sent. The
handler must not branch on which one it is running under.

HOW: ExecutionHost is an ABC with one async ``submit()``. Three
implementations cover the three capability levels, strongest first:

  AfterResponseHost: FastAPI BackgroundTasks; runs after the response is
      sent and the server awaits its completion
  DetachedTaskHost: asyncio.create_task; no completion guarantee, the
      process may be recycled before the task finishes
  InlineHost: awaits the work before returning, extending the
      response latency by the whole transform call

select_execution_host() picks one at start-up from configuration. "auto"
is a fixed preference for AfterResponseHost: the app always runs inside
an ASGI server, where FastAPI BackgroundTasks are available.

RULES:
- The handler calls submit() and nothing else
- DetachedTaskHost holds strong references to its tasks until they finish
- drain() waits for outstanding work; it is a no-op where nothing detaches
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Set, Type

from fastapi import BackgroundTasks

from slack_reword.errors import ConfigurationError

logger = logging.getLogger(__name__)

Work = Callable[..., Awaitable[None]]


class ExecutionHost(ABC):
    """Abstract base for deferred-work submission."""

    name = ""
    completion_guaranteed = False
    """True when the host runs submitted work to completion."""

    @abstractmethod
    async def submit(self, background_tasks: BackgroundTasks, work: Work, *args: Any) -> None:
        """Schedule ``work(*args)`` according to this host's capability.

        Args:
            background_tasks: The current request's BackgroundTasks; hosts
                that do not use it ignore it.
            work: An async callable; it must not raise.
            *args: Arguments for ``work``.
        """

    async def drain(self) -> None:
        """Wait for any submitted work that is still running."""


class AfterResponseHost(ExecutionHost):
    """Runs work after the response is sent, awaited by the server."""

    name = "after_response"
    completion_guaranteed = True

    async def submit(self, background_tasks: BackgroundTasks, work: Work, *args: Any) -> None:
        background_tasks.add_task(work, *args)


class DetachedTaskHost(ExecutionHost):
    """Runs work as a detached asyncio task on the server's event loop."""

    name = "detached"
    completion_guaranteed = False

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def submit(self, background_tasks: BackgroundTasks, work: Work, *args: Any) -> None:
        task = asyncio.create_task(work(*args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        # Work submitted while draining is waited for too
        while self._tasks:
            logger.info("Draining %d detached task(s)", len(self._tasks))
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class InlineHost(ExecutionHost):
    """Runs work to completion before the response is returned."""

    name = "inline"
    completion_guaranteed = True

    async def submit(self, background_tasks: BackgroundTasks, work: Work, *args: Any) -> None:
        await work(*args)


# Strongest capability first; "auto" is the first entry
EXECUTION_HOSTS: Dict[str, Type[ExecutionHost]] = {
    AfterResponseHost.name: AfterResponseHost,
    DetachedTaskHost.name: DetachedTaskHost,
    InlineHost.name: InlineHost,
}


def select_execution_host(name: str = "auto") -> ExecutionHost:
    """Create the execution host named by configuration.

    RULES:
    - "auto" (or "") always selects AfterResponseHost, the first registry
      entry; nothing is probed at runtime
    - Names are case-insensitive
    - Unknown names raise ConfigurationError
    """
    key = (name or "auto").strip().lower()
    if key == "auto":
        key = next(iter(EXECUTION_HOSTS))
    host_cls = EXECUTION_HOSTS.get(key)
    if host_cls is None:
        raise ConfigurationError(
            "Unknown execution host '{}'. Available: auto, {}".format(
                name, ", ".join(EXECUTION_HOSTS)
            )
        )
    host = host_cls()
    logger.info("Using execution host: %s", host.name)
    return host
