"""Domain models using Pydantic for validation."""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .naming import queue_name_for, subject_for


class SubscriptionDescriptor(BaseModel):
    """A resolved subscription ready to be handed to the transport."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        strict=True,
    )

    service_name: str = Field(..., description="Lower-cased type name")
    message_name: str = Field(..., description="Lower-cased member name without suffixes")
    queued: bool = Field(default=False, description="Whether to join a queue group")
    callback: Callable[..., Any] = Field(..., description="Bound callable receiving messages")

    @property
    def subject(self) -> str:
        """Subject to subscribe to."""
        return subject_for(self.service_name, self.message_name)

    @property
    def queue_name(self) -> str | None:
        """Queue group name, only set for queued descriptors."""
        if not self.queued:
            return None
        return queue_name_for(self.service_name, self.message_name)


class RegistrationOutcome(BaseModel):
    """Result of a single subscribe attempt."""

    model_config = ConfigDict(extra="forbid", strict=True, validate_assignment=True)

    subject: str = Field(..., description="Subject the attempt targeted")
    queue: str | None = Field(default=None, description="Queue group, if queued")
    success: bool = Field(..., description="Whether the transport accepted the subscription")
    error: str | None = Field(default=None, description="Error message if failed")

    @property
    def queued(self) -> bool:
        """Check if the attempt was a queue subscription."""
        return self.queue is not None


class RegistrationReport(BaseModel):
    """Aggregated outcomes of one registration batch."""

    model_config = ConfigDict(extra="forbid", strict=True, validate_assignment=True)

    outcomes: list[RegistrationOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> list[RegistrationOutcome]:
        """Outcomes whose subscription is live."""
        return [o for o in self.outcomes if o.success]

    @property
    def failed(self) -> list[RegistrationOutcome]:
        """Outcomes whose subscribe call was rejected."""
        return [o for o in self.outcomes if not o.success]

    @property
    def all_succeeded(self) -> bool:
        """Check if every attempt in the batch succeeded."""
        return all(o.success for o in self.outcomes)

    @property
    def subjects(self) -> list[str]:
        """Subjects of all attempts, in registration order."""
        return [o.subject for o in self.outcomes]

    def __len__(self) -> int:
        return len(self.outcomes)
