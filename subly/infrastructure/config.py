"""Configuration objects for the infrastructure layer."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NATSConnectionConfig(BaseModel):
    """Strongly-typed configuration for NATS connections.

    Encapsulates connection and payload encoding settings used by
    ``NATSTransport``.
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        strict=True,
        validate_assignment=True,
    )

    servers: list[str] = Field(
        default_factory=lambda: ["nats://localhost:4222"],
        min_length=1,
        description="List of NATS server URLs",
    )
    name: str | None = Field(
        default=None,
        description="Client connection name reported to the server",
    )
    max_reconnect_attempts: int = Field(
        default=10,
        ge=0,
        description="Maximum reconnection attempts",
    )
    reconnect_time_wait: float = Field(
        default=2.0,
        gt=0,
        description="Time to wait between reconnection attempts in seconds",
    )
    use_msgpack: bool = Field(
        default=False,
        description="Encode outgoing payloads with MessagePack instead of JSON",
    )

    @field_validator("servers")
    @classmethod
    def validate_servers(cls, v: list[str]) -> list[str]:
        """Validate server URLs format."""
        for server in v:
            if not server.startswith(("nats://", "tls://", "ws://", "wss://")):
                raise ValueError(
                    f"Invalid server URL: {server}. "
                    "Must start with nats://, tls://, ws://, or wss://"
                )
        return v

    def to_connection_params(self) -> dict[str, Any]:
        """Convert to parameters for NATS connection."""
        params: dict[str, Any] = {
            "servers": self.servers,
            "max_reconnect_attempts": self.max_reconnect_attempts,
            "reconnect_time_wait": self.reconnect_time_wait,
        }
        if self.name:
            params["name"] = self.name
        return params


class LogContext(BaseModel):
    """Strongly-typed context for structured logging.

    Provides a consistent set of keys for subscription diagnostics.
    """

    model_config = ConfigDict(
        extra="allow",
        str_strip_whitespace=True,
        strict=False,
        validate_assignment=True,
    )

    subject: str | None = Field(default=None, description="Subject involved")
    queue: str | None = Field(default=None, description="Queue group involved")
    operation: str | None = Field(default=None, description="Operation being performed")
    component: str | None = Field(default=None, description="Component generating the log")
    error_type: str | None = Field(default=None, description="Type of error encountered")
    error: str | None = Field(default=None, description="Error message")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging keyword arguments."""
        return {k: v for k, v in self.model_dump().items() if v is not None}

    def with_error(self, error: BaseException) -> LogContext:
        """Create a new context with error information."""
        return LogContext(
            **{
                **self.model_dump(),
                "error_type": type(error).__module__ + "." + type(error).__name__,
                "error": str(error),
            }
        )

    def with_operation(self, operation: str, component: str | None = None) -> LogContext:
        """Create a new context with operation information."""
        return LogContext(
            **{
                **self.model_dump(),
                "operation": operation,
                "component": component or self.component,
            }
        )
