"""Progress event contracts.

Long-running operations (bridge, withdraw) report through a stream of typed
events:
- status:   {step?, status, message}
- complete: operation-specific payload
- error:    {message, code?}

Payloads serialize with camelCase keys.
"""

import json
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventKind(str, Enum):
    STATUS = "status"
    COMPLETE = "complete"
    ERROR = "error"


class StepStatus(str, Enum):
    """Status reported in status events."""
    PENDING = "PENDING"
    DONE = "DONE"
    ACTION_REQUIRED = "ACTION_REQUIRED"
    FAILED = "FAILED"


class CompletionStatus(str, Enum):
    """Terminal status reported in complete events."""
    SUCCESS = "SUCCESS"
    EMPTY = "EMPTY"


class EventPayload(BaseModel):
    """Base for event payloads (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class StatusPayload(EventPayload):
    step: Optional[int] = Field(None, description="Step number, when the flow is numbered")
    status: StepStatus
    message: str


class TransactionLink(EventPayload):
    """A confirmed transaction with its explorer link."""
    tx_hash: str
    explorer_url: str
    label: Optional[str] = None


class BridgeCompletePayload(EventPayload):
    status: CompletionStatus = CompletionStatus.SUCCESS
    transactions: list[TransactionLink] = Field(default_factory=list)
    to_amount: str
    to_token: str
    to_chain: int


class WithdrawCompletePayload(EventPayload):
    status: CompletionStatus
    transactions: list[TransactionLink] = Field(default_factory=list)
    message: Optional[str] = None


class ErrorPayload(EventPayload):
    message: str
    code: Optional[str] = None


Payload = Union[StatusPayload, BridgeCompletePayload, WithdrawCompletePayload, ErrorPayload]


class ProgressEvent(BaseModel):
    """One event of an operation's progress stream."""

    event: EventKind
    data: dict

    @classmethod
    def status(
        cls, status: StepStatus, message: str, step: Optional[int] = None
    ) -> "ProgressEvent":
        payload = StatusPayload(step=step, status=status, message=message)
        return cls(event=EventKind.STATUS, data=payload.to_wire())

    @classmethod
    def complete(
        cls, payload: Union[BridgeCompletePayload, WithdrawCompletePayload]
    ) -> "ProgressEvent":
        return cls(event=EventKind.COMPLETE, data=payload.to_wire())

    @classmethod
    def error(cls, message: str, code: Optional[str] = None) -> "ProgressEvent":
        return cls(event=EventKind.ERROR, data=ErrorPayload(message=message, code=code).to_wire())

    @property
    def is_terminal(self) -> bool:
        return self.event in (EventKind.COMPLETE, EventKind.ERROR)

    def to_sse(self) -> str:
        """Frame as a Server-Sent Events message."""
        return f"event: {self.event.value}\ndata: {json.dumps(self.data)}\n\n"
