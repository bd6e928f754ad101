"""FastAPI application: the Slack webhook endpoints and composition root.

WHY: Slack delivers the /reword command, message shortcuts, and button
clicks as signed HTTP POSTs and gives each one three seconds to answer.
This module wires verification, parsing, the execution host, and the
dispatcher into endpoints that always answer within that window.

HOW: create_app() builds a FastAPI app around injected collaborators
(signing secret, transformer, callback poster, execution host), falling
back to configuration for any that are omitted. Per command request:

  verify signature → parse form → validate text → submit DeferredTask
  to the execution host → return the ephemeral acknowledgment

The reworded result (or failure) reaches the user later through the
payload's response_url, independently of this response.

RULES:
- Missing signing secret → 500 {"error": "Server configuration error"}
- Bad or stale signature → 401 {"error": "Invalid request signature"}
- Non-POST on a Slack route → 405 {"error": "Method not allowed"}
- Empty command text → 200 with a usage warning, nothing is scheduled
- The handler never branches on the execution host; it calls submit()
- Every log line for a request carries its 8-character request id
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.responses import JSONResponse

from slack_reword import __version__
from slack_reword.config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    EXECUTION_HOST,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    TRANSFORM_TIMEOUT_S,
    load_signing_secret,
)
from slack_reword.dispatch.callback import CallbackPoster
from slack_reword.dispatch.dispatcher import DeferredTask, RewordDispatcher, new_request_id
from slack_reword.dispatch.hosts import ExecutionHost, select_execution_host
from slack_reword.errors import AuthenticationError, ConfigurationError, ValidationError
from slack_reword.server.models import (
    ErrorResponse,
    HealthResponse,
    InteractionAck,
    ServiceInfo,
)
from slack_reword.slack.messages import (
    ACTION_COPY_PREFIX,
    EMPTY_INPUT_MESSAGE,
    NO_SHORTCUT_TEXT_MESSAGE,
    build_acknowledgment,
    build_copy_response,
    build_error_response,
    build_shortcut_acknowledgment,
)
from slack_reword.slack.payloads import (
    InteractionKind,
    InteractionPayload,
    parse_interaction,
    parse_slash_command,
)
from slack_reword.slack.verification import SignatureVerifier, SignedRequest
from slack_reword.transform.base import BaseTransformer
from slack_reword.transform.client import AnthropicRewordClient

logger = logging.getLogger(__name__)

SERVICE_NAME = "slack-reword"

# Slack routes answer every method; non-POST gets a JSON 405
_SLACK_ROUTES = ("/api/slack/reword", "/api/slack/shortcut", "/api/slack/interactive")
_NON_POST_METHODS = ["GET", "PUT", "PATCH", "DELETE", "OPTIONS"]

_ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Invalid or expired Slack signature"},
    500: {"model": ErrorResponse, "description": "Signing secret not configured"},
}
_INTERACTION_RESPONSES = dict(_ERROR_RESPONSES)
_INTERACTION_RESPONSES[400] = {"model": ErrorResponse, "description": "Missing interaction payload"}

_LOG_TEXT_MAX_CHARS = 30


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def create_app(
    signing_secret: Optional[str] = None,
    transformer: Optional[BaseTransformer] = None,
    poster: Optional[CallbackPoster] = None,
    host: Optional[ExecutionHost] = None,
    transform_timeout_s: float = TRANSFORM_TIMEOUT_S,
) -> FastAPI:
    """Create the FastAPI app with all Slack routes registered.

    WHY: A factory lets tests inject a secret, a fake transformer, a
    recording poster, and a specific execution host without touching the
    environment or the network.

    RULES:
    - signing_secret None → read SLACK_SIGNING_SECRET; "" → every Slack
      request is answered 500
    - transformer None → AnthropicRewordClient (API key resolved per call)
    - host None → select_execution_host(REWORD_EXECUTION_HOST)
    """
    secret = load_signing_secret() if signing_secret is None else signing_secret
    verifier = SignatureVerifier(secret) if secret else None
    if verifier is None:
        logger.error("SLACK_SIGNING_SECRET is not configured; Slack requests will get 500")

    dispatcher = RewordDispatcher(
        transformer=transformer or AnthropicRewordClient(),
        poster=poster or CallbackPoster(),
        timeout_s=transform_timeout_s,
    )
    execution_host = host or select_execution_host(EXECUTION_HOST)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Drain detached work on shutdown."""
        yield
        await execution_host.drain()

    app = FastAPI(
        lifespan=lifespan,
        title="Slack Reword",
        description=(
            "Webhook endpoints for the /reword slash command. Commands are "
            "acknowledged immediately; the reworded message is delivered "
            "to Slack's response_url when the model call finishes."
        ),
        version=__version__,
    )
    app.state.dispatcher = dispatcher
    app.state.execution_host = execution_host

    # -----------------------------------------------------------------------
    # Error mapping
    # -----------------------------------------------------------------------

    @app.exception_handler(ConfigurationError)
    async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
        return _error(500, "Server configuration error")

    @app.exception_handler(AuthenticationError)
    async def _authentication_error(request: Request, exc: AuthenticationError) -> JSONResponse:
        return _error(401, "Invalid request signature")

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=200, content=build_error_response(str(exc)))

    # -----------------------------------------------------------------------
    # Shared request steps
    # -----------------------------------------------------------------------

    async def verified_body(request: Request, request_id: str) -> bytes:
        """Return the raw body of a request that Slack really signed.

        Raises:
            ConfigurationError: no signing secret is configured.
            AuthenticationError: the signature or timestamp is invalid.
        """
        if verifier is None:
            logger.error("[%s] no_secret", request_id)
            raise ConfigurationError("SLACK_SIGNING_SECRET is not configured")

        raw_body = await request.body()
        signed = SignedRequest(
            raw_body=raw_body,
            signature=request.headers.get(SIGNATURE_HEADER),
            timestamp=request.headers.get(TIMESTAMP_HEADER),
        )
        if not verifier.verify(signed):
            logger.warning("[%s] bad_sig", request_id)
            raise AuthenticationError("Invalid request signature")
        return raw_body

    async def schedule(
        background_tasks: BackgroundTasks,
        request_id: str,
        text: str,
        callback_url: str,
    ) -> None:
        task = DeferredTask(request_id=request_id, text=text, callback_url=callback_url)
        await execution_host.submit(background_tasks, dispatcher.run, task)

    def answer_block_actions(interaction: InteractionPayload, request_id: str) -> Dict[str, Any]:
        action = interaction.first_action
        if action is not None and action.action_id.startswith(ACTION_COPY_PREFIX):
            logger.info("[%s] copy action=%s", request_id, action.action_id)
            return build_copy_response(action.value)
        return InteractionAck().model_dump()

    # -----------------------------------------------------------------------
    # Slack endpoints
    # -----------------------------------------------------------------------

    @app.post(
        "/api/slack/reword",
        tags=["slack"],
        summary="Handle the /reword slash command",
        responses=_ERROR_RESPONSES,
    )
    async def reword_command(request: Request, background_tasks: BackgroundTasks) -> Dict[str, Any]:
        request_id = new_request_id()
        logger.info("[%s] req", request_id)

        body = await verified_body(request, request_id)
        payload = parse_slash_command(body)
        logger.info(
            "[%s] parsed user=%s channel=%s command=%s text=%r has_url=%s",
            request_id,
            payload.user_id,
            payload.channel_id,
            payload.command,
            payload.text[:_LOG_TEXT_MAX_CHARS],
            bool(payload.callback_url),
        )

        text = payload.text.strip()
        if not text:
            raise ValidationError(EMPTY_INPUT_MESSAGE)

        await schedule(background_tasks, request_id, text, payload.callback_url)
        logger.info("[%s] ack", request_id)
        return build_acknowledgment()

    @app.post(
        "/api/slack/shortcut",
        tags=["slack"],
        summary="Handle the 'Reword' message shortcut",
        responses=_INTERACTION_RESPONSES,
    )
    async def message_shortcut(request: Request, background_tasks: BackgroundTasks) -> Any:
        request_id = new_request_id()
        logger.info("[%s] shortcut_req", request_id)

        body = await verified_body(request, request_id)
        interaction = parse_interaction(body)
        if interaction is None:
            logger.warning("[%s] no_payload", request_id)
            return _error(400, "Missing payload")
        logger.info(
            "[%s] shortcut_parsed type=%s callback_id=%s",
            request_id, interaction.raw_type, interaction.callback_id,
        )

        if interaction.kind in (InteractionKind.MESSAGE_ACTION, InteractionKind.SHORTCUT):
            text = interaction.text.strip()
            if not text:
                raise ValidationError(NO_SHORTCUT_TEXT_MESSAGE)
            await schedule(background_tasks, request_id, text, interaction.response_url)
            logger.info("[%s] shortcut_ack", request_id)
            return build_shortcut_acknowledgment()

        if interaction.kind is InteractionKind.BLOCK_ACTIONS:
            return answer_block_actions(interaction, request_id)

        logger.info("[%s] ignored interaction type=%s", request_id, interaction.raw_type)
        return InteractionAck().model_dump()

    @app.post(
        "/api/slack/interactive",
        tags=["slack"],
        summary="Handle interactive button clicks",
        responses=_INTERACTION_RESPONSES,
    )
    async def interactive(request: Request) -> Any:
        request_id = new_request_id()
        logger.info("[%s] interactive_req", request_id)

        body = await verified_body(request, request_id)
        interaction = parse_interaction(body)
        if interaction is None:
            return _error(400, "Missing payload")
        logger.info("[%s] interactive_parsed type=%s", request_id, interaction.raw_type)

        if interaction.kind is InteractionKind.BLOCK_ACTIONS:
            return answer_block_actions(interaction, request_id)
        return InteractionAck().model_dump()

    async def method_not_allowed() -> JSONResponse:
        return _error(405, "Method not allowed")

    for path in _SLACK_ROUTES:
        app.add_api_route(
            path,
            method_not_allowed,
            methods=_NON_POST_METHODS,
            include_in_schema=False,
        )

    # -----------------------------------------------------------------------
    # Service endpoints
    # -----------------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse, tags=["health"], summary="Health check")
    async def health_check() -> HealthResponse:
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    @app.get("/", response_model=ServiceInfo, tags=["health"], summary="Service info")
    async def root() -> ServiceInfo:
        return ServiceInfo(service=SERVICE_NAME, status="running")

    return app


def run_api(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Serve the app with uvicorn (entry point for ``slack-reword serve``)."""
    import uvicorn

    uvicorn.run("slack_reword.server.app:create_app", factory=True, host=host, port=port)
