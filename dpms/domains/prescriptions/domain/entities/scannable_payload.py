"""
Scannable Payload Entity

The QR artifact issued once per prescription for the pharmacy workflow.
"""

from dataclasses import dataclass, replace

from dpms.core.domain import SoftDeletableEntity


@dataclass
class ScannablePayload(SoftDeletableEntity[int]):
    """
    Issued payload; ``artifact`` is a PNG data URL of the QR image.

    A redacted view keeps the record shape and only drops the artifact.
    """

    prescription_id: int = 0
    patient_id: int = 0
    doctor_id: int = 0
    artifact: str | None = None

    def redacted(self) -> "ScannablePayload":
        return replace(self, artifact=None)

    @property
    def is_redacted(self) -> bool:
        return self.artifact is None
