"""
API tests for the prescription, payload and reminder routes.

Use cases are replaced through ``dependency_overrides``, so no database or
SMTP relay is involved. The client is used without a ``with`` block, which
keeps the lifespan (scheduler, engine) from starting.
"""

from dataclasses import replace
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from dpms.core.app_factory import create_app
from dpms.core.domain import (
    ChannelTimeoutException,
    EntityNotFoundException,
    NoMatchingLinesException,
    PayloadAlreadyIssuedException,
)
from dpms.domains.prescriptions.api import dependencies as deps
from dpms.domains.prescriptions.application.dto import (
    ApplyAmountsResult,
    ChannelHealth,
    DispatchResult,
    PatientReminders,
    ReminderEntry,
    ReminderRunResult,
)
from dpms.domains.prescriptions.application.ports import DeliveryResult
from dpms.domains.prescriptions.domain.value_objects import TimingSlot, ViewerRole

API = "/api/v1"


def headers(role: str, user_id: int = 1) -> dict[str, str]:
    return {"X-User-Id": str(user_id), "X-User-Role": role}


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def override(app):
    """Install a mock use case for a dependency getter."""

    def _override(getter, mock):
        app.dependency_overrides[getter] = lambda: mock
        return mock

    yield _override
    app.dependency_overrides.clear()


# ============================================================================
# Health and identity
# ============================================================================


@pytest.mark.api
def test_health(client):
    """Test the health endpoint."""
    # Act
    response = client.get(f"{API}/health")

    # Assert
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.api
def test_correlation_id_is_echoed(client):
    """Test that the correlation id header is echoed back."""
    # Act
    response = client.get(f"{API}/health", headers={"X-Correlation-ID": "abc123"})

    # Assert
    assert response.headers["X-Correlation-ID"] == "abc123"


@pytest.mark.api
def test_missing_identity_headers(client, override):
    """Test that a request without identity headers fails validation."""
    # Arrange
    override(deps.get_prescription_use_case, AsyncMock())

    # Act
    response = client.get(f"{API}/prescriptions/1")

    # Assert
    assert response.status_code == 422
    assert response.json()["code"] == "REQUEST_VALIDATION_ERROR"


@pytest.mark.api
def test_unknown_role_is_forbidden(client, override):
    """Test that an unknown role is forbidden."""
    # Arrange
    override(deps.get_prescription_use_case, AsyncMock())

    # Act
    response = client.get(f"{API}/prescriptions/1", headers=headers("nurse"))

    # Assert
    assert response.status_code == 403
    assert response.json()["code"] == "AUTHORIZATION_ERROR"


@pytest.mark.api
def test_role_guard(client, override):
    """Test that a patient cannot enter amounts."""
    # Arrange
    use_case = override(deps.get_apply_amounts_use_case, AsyncMock())

    # Act
    response = client.put(
        f"{API}/prescriptions/1/amounts",
        json={"total_amount": "10"},
        headers=headers("patient"),
    )

    # Assert
    assert response.status_code == 403
    use_case.execute.assert_not_called()


# ============================================================================
# Prescriptions
# ============================================================================


@pytest.mark.api
def test_create_prescription_uses_caller_as_doctor(client, override, make_prescription):
    """Test that the calling doctor becomes the prescription's doctor."""
    # Arrange
    use_case = override(deps.get_create_prescription_use_case, AsyncMock())
    use_case.execute.return_value = make_prescription(prescription_id=12)

    # Act
    response = client.post(
        f"{API}/prescriptions",
        json={"patient_id": 7, "disease": "Hypertension", "medications": [{"medicine_id": 10, "timing": ["M"]}]},
        headers=headers("doctor", user_id=3),
    )

    # Assert
    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 12
    assert body["medications"][0]["timing"] == ["M"]
    request = use_case.execute.call_args.args[0]
    assert request.doctor_id == 3
    assert request.medications[0].timing == ["M"]


@pytest.mark.api
def test_create_prescription_rejects_empty_medications(client, override):
    """Test that a prescription without medications fails validation."""
    # Arrange
    override(deps.get_create_prescription_use_case, AsyncMock())

    # Act
    response = client.post(
        f"{API}/prescriptions",
        json={"patient_id": 7, "disease": "Flu", "medications": []},
        headers=headers("doctor"),
    )

    # Assert
    assert response.status_code == 422


@pytest.mark.api
def test_get_prescription_passes_role(client, override, make_prescription):
    """Test that a read passes the caller's role to the use case."""
    # Arrange
    use_case = override(deps.get_prescription_use_case, AsyncMock())
    use_case.execute.return_value = make_prescription()

    # Act
    response = client.get(f"{API}/prescriptions/1", headers=headers("patient", user_id=7))

    # Assert
    assert response.status_code == 200
    use_case.execute.assert_awaited_once_with(1, ViewerRole.PATIENT)


@pytest.mark.api
def test_get_missing_prescription(client, override):
    """Test the error body for a missing prescription."""
    # Arrange
    use_case = override(deps.get_prescription_use_case, AsyncMock())
    use_case.execute.side_effect = EntityNotFoundException("Prescription", 9)

    # Act
    response = client.get(f"{API}/prescriptions/9", headers=headers("doctor"))

    # Assert
    assert response.status_code == 404
    assert response.json() == {
        "error": True,
        "message": "Prescription with ID 9 not found",
        "code": "ENTITY_NOT_FOUND",
        "details": {"entity_type": "Prescription", "entity_id": "9"},
        "status_code": 404,
    }


@pytest.mark.api
def test_enter_amounts(client, override, make_prescription, make_line):
    """Test entering explicit line amounts as a pharmacist."""
    # Arrange
    prescription = make_prescription(lines=[make_line(line_id=1, amount="4.50")])
    use_case = override(deps.get_apply_amounts_use_case, AsyncMock())
    use_case.execute.return_value = ApplyAmountsResult(prescription=prescription, updated_line_ids=[1], all_priced=True)

    # Act
    response = client.put(
        f"{API}/prescriptions/1/amounts",
        json={"line_amounts": {"1": "4.50"}},
        headers=headers("pharmacist"),
    )

    # Assert
    assert response.status_code == 200
    assert response.json()["all_priced"] is True
    request = use_case.execute.call_args.args[0]
    assert request.line_amounts == {1: Decimal("4.50")}
    assert request.total_amount is None


@pytest.mark.api
def test_pending_pricing_listing(client, override, make_prescription):
    """Test the pharmacist pricing queue."""
    # Arrange
    use_case = override(deps.get_pending_pricing_use_case, AsyncMock())
    use_case.execute.return_value = [make_prescription(prescription_id=4)]

    # Act
    response = client.get(f"{API}/prescriptions/pending-pricing", headers=headers("pharmacist"))

    # Assert
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [4]


@pytest.mark.api
def test_my_prescriptions_for_patient(client, override, make_prescription):
    """Test that a patient lists their own prescriptions."""
    # Arrange
    use_case = override(deps.get_list_prescriptions_use_case, AsyncMock())
    use_case.list_for_patient.return_value = [make_prescription(prescription_id=5)]

    # Act
    response = client.get(f"{API}/prescriptions/mine", headers=headers("patient", user_id=7))

    # Assert
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [5]
    assert response.json()[0]["medications"][0]["amount"] is None
    use_case.list_for_patient.assert_awaited_once_with(7)


@pytest.mark.api
def test_my_prescriptions_rejects_doctor(client, override):
    """Test that the patient listing is closed to other roles."""
    # Arrange
    use_case = override(deps.get_list_prescriptions_use_case, AsyncMock())

    # Act
    response = client.get(f"{API}/prescriptions/mine", headers=headers("doctor"))

    # Assert
    assert response.status_code == 403
    use_case.list_for_patient.assert_not_called()


@pytest.mark.api
def test_doctor_lists_issued_prescriptions(client, override, make_prescription):
    """Test that a doctor lists the prescriptions they wrote."""
    # Arrange
    use_case = override(deps.get_list_prescriptions_use_case, AsyncMock())
    use_case.list_by_doctor.return_value = [make_prescription(prescription_id=6)]

    # Act
    response = client.get(f"{API}/prescriptions/mine-issued", headers=headers("doctor", user_id=3))

    # Assert
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [6]
    use_case.list_by_doctor.assert_awaited_once_with(3)


@pytest.mark.api
def test_doctor_lists_patient_prescriptions_they_wrote(client, override, make_prescription):
    """Test that a doctor filtering by patient only gets their own prescriptions."""
    # Arrange
    use_case = override(deps.get_list_prescriptions_use_case, AsyncMock())
    use_case.list_by_patient.return_value = [make_prescription()]

    # Act
    response = client.get(f"{API}/prescriptions", params={"patient_id": 7}, headers=headers("doctor", user_id=3))

    # Assert
    assert response.status_code == 200
    use_case.list_by_patient.assert_awaited_once_with(7, doctor_id=3)


@pytest.mark.api
def test_admin_lists_patient_prescriptions_from_every_doctor(client, override, make_prescription):
    """Test that an admin filtering by patient is not scoped to a doctor."""
    # Arrange
    use_case = override(deps.get_list_prescriptions_use_case, AsyncMock())
    use_case.list_by_patient.return_value = [make_prescription()]

    # Act
    response = client.get(f"{API}/prescriptions", params={"patient_id": 7}, headers=headers("admin"))

    # Assert
    assert response.status_code == 200
    use_case.list_by_patient.assert_awaited_once_with(7)


@pytest.mark.api
@pytest.mark.parametrize("role", ["admin", "doctor"])
def test_list_all_prescriptions(client, override, make_prescription, role):
    """Test that admins and doctors list every active prescription."""
    # Arrange
    use_case = override(deps.get_list_prescriptions_use_case, AsyncMock())
    use_case.list_all.return_value = [make_prescription(prescription_id=1), make_prescription(prescription_id=2)]

    # Act
    response = client.get(f"{API}/prescriptions", headers=headers(role))

    # Assert
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [1, 2]


@pytest.mark.api
@pytest.mark.parametrize("role", ["patient", "pharmacist"])
def test_list_all_prescriptions_rejects_other_roles(client, override, role):
    """Test that patients and pharmacists cannot list every prescription."""
    # Arrange
    use_case = override(deps.get_list_prescriptions_use_case, AsyncMock())

    # Act
    response = client.get(f"{API}/prescriptions", headers=headers(role))

    # Assert
    assert response.status_code == 403
    use_case.list_all.assert_not_called()


@pytest.mark.api
def test_admin_deactivates_prescription(client, override, make_prescription):
    """Test that an admin soft deletes a prescription."""
    # Arrange
    use_case = override(deps.get_deactivate_prescription_use_case, AsyncMock())
    use_case.execute.return_value = make_prescription(is_active=False)

    # Act
    response = client.delete(f"{API}/prescriptions/1", headers=headers("admin"))

    # Assert
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    use_case.execute.assert_awaited_once_with(1)


@pytest.mark.api
def test_doctor_cannot_deactivate_prescription(client, override):
    """Test that soft delete is admin-only."""
    # Arrange
    use_case = override(deps.get_deactivate_prescription_use_case, AsyncMock())

    # Act
    response = client.delete(f"{API}/prescriptions/1", headers=headers("doctor"))

    # Assert
    assert response.status_code == 403
    use_case.execute.assert_not_called()


# ============================================================================
# Payloads
# ============================================================================


@pytest.mark.api
def test_issue_payload(client, override, sample_payload):
    """Test issuing a payload returns the rendered artifact."""
    # Arrange
    use_case = override(deps.get_issue_payload_use_case, AsyncMock())
    use_case.execute.return_value = sample_payload

    # Act
    response = client.post(f"{API}/payloads", json={"prescription_id": 1}, headers=headers("doctor"))

    # Assert
    assert response.status_code == 201
    assert response.json()["artifact"].startswith("data:image/png;base64,")


@pytest.mark.api
def test_issue_payload_twice(client, override):
    """Test that a second issue conflicts."""
    # Arrange
    use_case = override(deps.get_issue_payload_use_case, AsyncMock())
    use_case.execute.side_effect = PayloadAlreadyIssuedException(1)

    # Act
    response = client.post(f"{API}/payloads", json={"prescription_id": 1}, headers=headers("doctor"))

    # Assert
    assert response.status_code == 409
    assert response.json()["code"] == "ALREADY_ISSUED"


@pytest.mark.api
def test_redacted_payload_has_null_artifact(client, override, sample_payload):
    """Test that a redacted payload serializes a null artifact."""
    # Arrange
    use_case = override(deps.get_payload_use_case, AsyncMock())
    use_case.execute.return_value = sample_payload.redacted()

    # Act
    response = client.get(f"{API}/payloads/1", headers=headers("pharmacist"))

    # Assert
    assert response.status_code == 200
    assert response.json()["artifact"] is None
    use_case.execute.assert_awaited_once_with(1, ViewerRole.PHARMACIST)


@pytest.mark.api
def test_my_payloads_use_caller_id(client, override, sample_payload):
    """Test that a patient lists payloads by their own id."""
    # Arrange
    use_case = override(deps.get_patient_payloads_use_case, AsyncMock())
    use_case.execute.return_value = [replace(sample_payload, artifact=None)]

    # Act
    response = client.get(f"{API}/payloads/mine", headers=headers("patient", user_id=7))

    # Assert
    assert response.status_code == 200
    use_case.execute.assert_awaited_once_with(7)


# ============================================================================
# Reminders
# ============================================================================


@pytest.mark.api
def test_patient_reminders(client, override, now):
    """Test the patient reminder view grouped by slot."""
    # Arrange
    use_case = override(deps.get_patient_reminders_use_case, AsyncMock())
    entry = ReminderEntry(prescription_id=1, disease="Flu", medicine_name="Zinc", dosage="50mg", date=now)
    use_case.execute.return_value = PatientReminders(morning=[entry])

    # Act
    response = client.get(f"{API}/reminders/patient", headers=headers("patient", user_id=7))

    # Assert
    assert response.status_code == 200
    body = response.json()
    assert body["morning"][0]["medicine_name"] == "Zinc"
    assert body["afternoon"] == [] and body["night"] == []


@pytest.mark.api
def test_send_reminder_now(client, override):
    """Test an immediate reminder send."""
    # Arrange
    use_case = override(deps.get_reminder_dispatch_use_case, AsyncMock())
    use_case.send_now.return_value = DispatchResult(
        prescription_id=1,
        timing=TimingSlot.NIGHT,
        recipient="ana@example.com",
        medication_count=2,
    )

    # Act
    response = client.post(
        f"{API}/reminders/send",
        json={"prescription_id": 1, "timing": "N"},
        headers=headers("doctor"),
    )

    # Assert
    assert response.status_code == 200
    assert response.json()["medication_count"] == 2
    use_case.send_now.assert_awaited_once_with(1, TimingSlot.NIGHT)


@pytest.mark.api
def test_send_reminder_invalid_timing(client, override):
    """Test that an unknown timing code fails validation."""
    # Arrange
    override(deps.get_reminder_dispatch_use_case, AsyncMock())

    # Act
    response = client.post(
        f"{API}/reminders/send",
        json={"prescription_id": 1, "timing": "X"},
        headers=headers("doctor"),
    )

    # Assert
    assert response.status_code == 422


@pytest.mark.api
@pytest.mark.parametrize(
    "error,status_code",
    [
        (NoMatchingLinesException(1, "M"), 400),
        (ChannelTimeoutException("Connection timeout.", hint="Check firewall"), 504),
    ],
)
def test_send_reminder_errors(client, override, error, status_code):
    """Test the status and code of immediate send failures."""
    # Arrange
    use_case = override(deps.get_reminder_dispatch_use_case, AsyncMock())
    use_case.send_now.side_effect = error

    # Act
    response = client.post(
        f"{API}/reminders/send",
        json={"prescription_id": 1, "timing": "M"},
        headers=headers("admin"),
    )

    # Assert
    assert response.status_code == status_code
    assert response.json()["code"] == error.code


@pytest.mark.api
def test_run_bucket_now(client, override):
    """Test running a reminder bucket on demand."""
    # Arrange
    scheduler = override(deps.get_reminder_scheduler, MagicMock())
    scheduler.run_now = AsyncMock(return_value=ReminderRunResult(timing=TimingSlot.MORNING, matched=3, sent=2, skipped=1))

    # Act
    response = client.post(f"{API}/reminders/run/M", headers=headers("admin"))

    # Assert
    assert response.status_code == 200
    assert response.json() == {"timing": "M", "matched": 3, "sent": 2, "skipped": 1, "failed": 0, "stale": 0}


@pytest.mark.api
def test_check_config(client, override):
    """Test the delivery channel health check."""
    # Arrange
    use_case = override(deps.get_channel_health_use_case, AsyncMock())
    use_case.check.return_value = ChannelHealth(
        configured=True,
        host="smtp.example.com",
        port=587,
        username_hint="rem***",
        connection_status="connected",
    )

    # Act
    response = client.get(f"{API}/reminders/check-config", headers=headers("admin"))

    # Assert
    assert response.status_code == 200
    assert response.json()["connection_status"] == "connected"


@pytest.mark.api
def test_send_test_email(client, override):
    """Test sending a test e-mail."""
    # Arrange
    use_case = override(deps.get_channel_health_use_case, AsyncMock())
    use_case.send_test.return_value = DeliveryResult.ok(recipient="ops@example.com", message_id="<1@example.com>")

    # Act
    response = client.post(
        f"{API}/reminders/test-email",
        json={"email": "ops@example.com"},
        headers=headers("admin"),
    )

    # Assert
    assert response.status_code == 200
    assert response.json()["recipient"] == "ops@example.com"
