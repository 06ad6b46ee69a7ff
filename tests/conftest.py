"""
Shared pytest fixtures for all tests.

Provides domain object factories and mocked ports. Nothing here needs a
database or an SMTP relay.
"""

import os
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("REMINDER_SCHEDULER_ENABLED", "False")

from dpms.domains.prescriptions.application.ports import DeliveryResult  # noqa: E402
from dpms.domains.prescriptions.domain.entities import (  # noqa: E402
    MedicationLine,
    Prescription,
    ScannablePayload,
    UserProfile,
)
from dpms.domains.prescriptions.domain.value_objects import (  # noqa: E402
    MedicineInfo,
    TimingSlot,
    ViewerRole,
)

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


# ============================================================================
# DOMAIN FACTORIES
# ============================================================================


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_line():
    """Factory for medication lines; ``timing`` accepts slot codes."""

    def _make(
        line_id: int | None = 1,
        medicine_id: int = 10,
        timing: str = "M",
        amount: str | None = None,
        name: str = "Amoxicillin",
        dosage: str = "500mg",
    ) -> MedicationLine:
        return MedicationLine(
            id=line_id,
            medicine_id=medicine_id,
            timing=frozenset(TimingSlot(code) for code in timing),
            amount=Decimal(amount) if amount is not None else None,
            medicine=MedicineInfo(id=medicine_id, name=name, dosage=dosage),
        )

    return _make


@pytest.fixture
def make_prescription(make_line):
    """Factory for persisted prescriptions (id set)."""

    def _make(
        prescription_id: int = 1,
        lines: list[MedicationLine] | None = None,
        patient_id: int = 7,
        doctor_id: int = 3,
        issued_at: datetime = NOW,
        is_active: bool = True,
        payload_issued: bool = False,
    ) -> Prescription:
        return Prescription(
            id=prescription_id,
            patient_id=patient_id,
            doctor_id=doctor_id,
            disease="Hypertension",
            medications=lines if lines is not None else [make_line()],
            issued_at=issued_at,
            is_active=is_active,
            payload_issued=payload_issued,
        )

    return _make


@pytest.fixture
def patient() -> UserProfile:
    return UserProfile(
        id=7,
        name="Ana Torres",
        role=ViewerRole.PATIENT,
        age=34,
        gender="female",
        mobile="+15550101",
        email="ana@example.com",
    )


@pytest.fixture
def doctor() -> UserProfile:
    return UserProfile(id=3, name="Dr. Ruiz", role=ViewerRole.DOCTOR, email="ruiz@example.com")


@pytest.fixture
def sample_payload() -> ScannablePayload:
    return ScannablePayload(
        id=100,
        prescription_id=1,
        patient_id=7,
        doctor_id=3,
        artifact="data:image/png;base64,AAAA",
        created_at=NOW,
    )


# ============================================================================
# MOCKED PORTS
# ============================================================================


@pytest.fixture
def mock_prescription_repository():
    return AsyncMock()


@pytest.fixture
def mock_payload_repository():
    return AsyncMock()


@pytest.fixture
def mock_user_directory(patient, doctor):
    directory = AsyncMock()
    users = {patient.id: patient, doctor.id: doctor}
    directory.find_by_id.side_effect = lambda user_id: users.get(user_id)
    return directory


@pytest.fixture
def mock_channel():
    channel = AsyncMock()
    channel.is_configured = True
    channel.host = "smtp.example.com"
    channel.port = 587
    channel.username = "reminders@example.com"
    channel.send.side_effect = lambda message: DeliveryResult.ok(recipient=message.to, message_id="<id@example.com>")
    channel.invalidate = MagicMock()
    return channel
