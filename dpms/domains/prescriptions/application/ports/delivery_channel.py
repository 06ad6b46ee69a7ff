"""
Delivery Channel Port

Outbound message types, classified failures and the channel interface.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from dpms.core.domain import (
    ChannelAuthFailureException,
    ChannelConnectionFailureException,
    ChannelException,
    ChannelInvalidAddressException,
    ChannelNotConfiguredException,
    ChannelRejectedException,
    ChannelTimeoutException,
    StatusEnum,
)

if TYPE_CHECKING:
    from dpms.domains.prescriptions.domain.entities import MedicationLine, UserProfile
    from dpms.domains.prescriptions.domain.value_objects import TimingSlot


class DeliveryFailureKind(StatusEnum):
    NOT_CONFIGURED = "not_configured"
    AUTHENTICATION = "authentication"
    CONNECTION = "connection"
    TIMEOUT = "timeout"
    INVALID_ADDRESS = "invalid_address"
    REJECTED = "rejected"


_EXCEPTIONS: dict[DeliveryFailureKind, type[ChannelException]] = {
    DeliveryFailureKind.NOT_CONFIGURED: ChannelNotConfiguredException,
    DeliveryFailureKind.AUTHENTICATION: ChannelAuthFailureException,
    DeliveryFailureKind.CONNECTION: ChannelConnectionFailureException,
    DeliveryFailureKind.TIMEOUT: ChannelTimeoutException,
    DeliveryFailureKind.INVALID_ADDRESS: ChannelInvalidAddressException,
    DeliveryFailureKind.REJECTED: ChannelRejectedException,
}


@dataclass(frozen=True)
class DeliveryFailure:
    """Classified reason a send or verify did not succeed."""

    kind: DeliveryFailureKind
    message: str
    hint: str | None = None
    smtp_code: int | None = None

    def to_exception(self) -> ChannelException:
        return _EXCEPTIONS[self.kind](self.message, hint=self.hint, smtp_code=self.smtp_code)


@dataclass(frozen=True)
class OutboundMessage:
    to: str
    subject: str
    text: str
    html: str | None = None


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    recipient: str | None = None
    message_id: str | None = None
    failure: DeliveryFailure | None = None

    @classmethod
    def ok(cls, recipient: str | None = None, message_id: str | None = None) -> "DeliveryResult":
        return cls(success=True, recipient=recipient, message_id=message_id)

    @classmethod
    def failed(cls, failure: DeliveryFailure, recipient: str | None = None) -> "DeliveryResult":
        return cls(success=False, recipient=recipient, failure=failure)

    def raise_for_failure(self) -> None:
        """Raise the classified channel exception if the delivery failed."""
        if self.failure is not None:
            raise self.failure.to_exception()


@runtime_checkable
class IDeliveryChannel(Protocol):
    """
    Outbound e-mail channel.

    ``send`` and ``verify`` never raise for transport problems; they report
    a classified ``DeliveryFailure`` instead.
    """

    @property
    def is_configured(self) -> bool:
        ...

    @property
    def host(self) -> str:
        ...

    @property
    def port(self) -> int:
        ...

    @property
    def username(self) -> str | None:
        ...

    async def send(self, message: OutboundMessage) -> DeliveryResult:
        ...

    async def verify(self) -> DeliveryResult:
        ...

    def invalidate(self) -> None:
        ...

    async def close(self) -> None:
        ...


@runtime_checkable
class IReminderComposer(Protocol):
    """Lays out a medication reminder for one patient and one timing slot."""

    def compose(
        self,
        recipient: "UserProfile",
        timing: "TimingSlot",
        lines: list["MedicationLine"],
    ) -> OutboundMessage:
        ...
