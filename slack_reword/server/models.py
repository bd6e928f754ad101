"""Pydantic response models for the non-Slack parts of the HTTP API.

WHY: Error, health, and service-info bodies appear in the OpenAPI docs
and must have a stable shape. Slack message bodies are built as plain
dicts by slack.messages and are not modelled here.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Error bodies are always {"error": "<message>"}
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every non-2xx response from the Slack endpoints."""

    error: str = Field(description="Human-readable error message.")

    model_config = {"json_schema_extra": {
        "examples": [{"error": "Invalid request signature"}],
    }}


class HealthResponse(BaseModel):
    """Liveness check response."""

    status: str = Field(description="Always 'ok' when the server is running.")
    timestamp: str = Field(description="Server time, ISO 8601 in UTC.")


class ServiceInfo(BaseModel):
    """Root endpoint response identifying the service."""

    service: str = Field(description="Service name.")
    status: str = Field(description="Always 'running' when the server is up.")


class InteractionAck(BaseModel):
    """Empty acknowledgment for interactions that need no reply."""

    ok: bool = Field(default=True, description="Always true.")
