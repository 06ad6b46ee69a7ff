"""
Payload Snapshot

Denormalized JSON document encoded into the scannable payload at issue time.
"""

import json
from typing import Any

from dpms.core.domain import ValidationException

from ..entities import Prescription, UserProfile
from ..value_objects import ordered_slots


class PayloadSnapshotBuilder:
    """
    Builds the snapshot of a prescription and the people on it.

    Medicine details are copied in, so later catalog edits never change
    an issued payload.

    Example:
        ```python
        snapshot = PayloadSnapshotBuilder().build(prescription, patient, doctor)
        text = PayloadSnapshotBuilder.to_json(snapshot)
        ```
    """

    def build(self, prescription: Prescription, patient: UserProfile, doctor: UserProfile) -> dict[str, Any]:
        medications = []
        for line in prescription.medications:
            if line.medicine is None:
                raise ValidationException(
                    f"Medicine {line.medicine_id} not found in catalog",
                    field="medications",
                    details={"medicine_id": line.medicine_id},
                )
            medications.append(
                {
                    "medicine": line.medicine.to_snapshot(),
                    "timing": [slot.value for slot in ordered_slots(line.timing)],
                    "amount": float(line.amount) if line.amount is not None else None,
                }
            )

        return {
            "prescriptionId": prescription.id,
            "patient": {
                "id": patient.id,
                "name": patient.name,
                "age": patient.age,
                "gender": patient.gender,
                "mobile": patient.mobile,
                "email": patient.email,
            },
            "doctor": {
                "id": doctor.id,
                "name": doctor.name,
                "role": doctor.role.value,
            },
            "medications": medications,
            "disease": prescription.disease,
            "diseaseType": prescription.disease_type.value,
            "date": prescription.issued_at.isoformat(),
            "payloadIssued": prescription.payload_issued,
            "active": prescription.is_active,
        }

    @staticmethod
    def to_json(snapshot: dict[str, Any]) -> str:
        """Compact JSON, keys in snapshot order."""
        return json.dumps(snapshot, separators=(",", ":"), ensure_ascii=False)
