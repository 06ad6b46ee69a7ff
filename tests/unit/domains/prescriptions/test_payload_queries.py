"""
Unit tests for payload reads and the patient reminder view.
"""

from datetime import timedelta

import pytest

from dpms.core.domain import EntityNotFoundException
from dpms.domains.prescriptions.application.use_cases import (
    GetPatientRemindersUseCase,
    GetPayloadUseCase,
    ListAllPayloadsUseCase,
    ListPatientPayloadsUseCase,
)
from dpms.domains.prescriptions.domain.value_objects import ViewerRole


@pytest.fixture
def priced_prescription(make_prescription, make_line):
    return make_prescription(lines=[make_line(line_id=1, amount="3.00"), make_line(line_id=2, amount="1.00")])


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_get_payload_redacts_once_priced(
    mock_payload_repository, mock_prescription_repository, priced_prescription, sample_payload
):
    """Test that a fully priced prescription hides the artifact from everyone but admins."""
    # Arrange
    mock_payload_repository.find_by_prescription_id.return_value = sample_payload
    mock_prescription_repository.find_by_id.return_value = priced_prescription
    use_case = GetPayloadUseCase(mock_payload_repository, mock_prescription_repository)

    # Act
    as_pharmacist = await use_case.execute(1, ViewerRole.PHARMACIST)
    as_admin = await use_case.execute(1, ViewerRole.ADMIN)

    # Assert
    assert as_pharmacist.artifact is None
    assert as_admin.artifact == sample_payload.artifact


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_get_payload_visible_while_unpriced(
    mock_payload_repository, mock_prescription_repository, make_prescription, sample_payload
):
    """Test that the artifact stays visible while a line is unpriced."""
    # Arrange
    mock_payload_repository.find_by_prescription_id.return_value = sample_payload
    mock_prescription_repository.find_by_id.return_value = make_prescription()
    use_case = GetPayloadUseCase(mock_payload_repository, mock_prescription_repository)

    # Act
    payload = await use_case.execute(1, ViewerRole.PATIENT)

    # Assert
    assert payload.artifact == sample_payload.artifact


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_get_payload_not_issued(mock_payload_repository, mock_prescription_repository):
    """Test reading a payload that was never issued."""
    # Arrange
    mock_payload_repository.find_by_prescription_id.return_value = None
    use_case = GetPayloadUseCase(mock_payload_repository, mock_prescription_repository)

    # Act & Assert
    with pytest.raises(EntityNotFoundException) as exc_info:
        await use_case.execute(1, ViewerRole.DOCTOR)

    assert "No payload issued" in exc_info.value.message


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_patient_listing_uses_patient_view(
    mock_payload_repository, mock_prescription_repository, priced_prescription, sample_payload
):
    """Test that the patient payload listing applies the patient view."""
    # Arrange
    mock_payload_repository.find_active_by_patient.return_value = [sample_payload]
    mock_prescription_repository.find_by_id.return_value = priced_prescription
    use_case = ListPatientPayloadsUseCase(mock_payload_repository, mock_prescription_repository)

    # Act
    payloads = await use_case.execute(7)

    # Assert
    assert [p.artifact for p in payloads] == [None]
    mock_payload_repository.find_active_by_patient.assert_awaited_once_with(7)


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_admin_listing_is_never_redacted(mock_payload_repository, sample_payload):
    """Test that the admin payload listing always carries artifacts."""
    # Arrange
    mock_payload_repository.find_all_active.return_value = [sample_payload]

    # Act
    payloads = await ListAllPayloadsUseCase(mock_payload_repository).execute()

    # Assert
    assert payloads[0].artifact == sample_payload.artifact


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_patient_reminders_grouped_by_slot(
    mock_prescription_repository, make_prescription, make_line, now
):
    """Test that a patient's reminders are grouped by slot, newest prescription first."""
    # Arrange
    newer = make_prescription(
        prescription_id=2,
        issued_at=now,
        lines=[make_line(line_id=3, timing="MN", name="Metformin", dosage="850mg")],
    )
    older = make_prescription(
        prescription_id=1,
        issued_at=now - timedelta(days=3),
        lines=[make_line(line_id=1, timing="A", name="Ibuprofen", dosage="400mg")],
    )
    no_catalog = make_line(line_id=4, timing="N")
    no_catalog.medicine = None
    older.medications.append(no_catalog)
    mock_prescription_repository.find_issued_for_patient.return_value = [newer, older]

    # Act
    reminders = await GetPatientRemindersUseCase(mock_prescription_repository).execute(7)

    # Assert
    assert [e.medicine_name for e in reminders.morning] == ["Metformin"]
    assert [e.medicine_name for e in reminders.afternoon] == ["Ibuprofen"]
    assert [(e.prescription_id, e.medicine_name) for e in reminders.night] == [(2, "Metformin"), (1, "N/A")]
    assert reminders.night[1].dosage == "N/A"
