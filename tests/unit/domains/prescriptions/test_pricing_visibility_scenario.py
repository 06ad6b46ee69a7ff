"""
Scenario: reminders and payload visibility across the pricing transition.

One prescription with two lines: the first taken Morning and Night and
priced at 50, the second Morning only and unpriced.
"""

from decimal import Decimal

import pytest

from dpms.domains.prescriptions.application.dto import ApplyAmountsRequest
from dpms.domains.prescriptions.application.use_cases import (
    ApplyAmountsUseCase,
    GetPayloadUseCase,
    ReminderDispatchUseCase,
)
from dpms.domains.prescriptions.domain.value_objects import TimingSlot, ViewerRole
from dpms.domains.prescriptions.infrastructure.delivery import ReminderMessageComposer


@pytest.fixture
def prescription(make_prescription, make_line):
    return make_prescription(
        payload_issued=True,
        lines=[
            make_line(line_id=1, timing="MN", amount="50", name="Losartan"),
            make_line(line_id=2, medicine_id=11, timing="M", name="Aspirin"),
        ],
    )


@pytest.fixture
def repository(mock_prescription_repository, prescription):
    mock_prescription_repository.find_by_id.return_value = prescription
    mock_prescription_repository.save.side_effect = lambda p: p
    mock_prescription_repository.find_reminder_candidates.side_effect = lambda slot: [
        p for p in [prescription] if p.lines_for(slot)
    ]
    return mock_prescription_repository


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_bucket_messages_list_only_matching_lines(repository, mock_user_directory, mock_channel, now):
    """Test that each bucket message lists only the lines taken in that slot."""
    # Arrange
    dispatch = ReminderDispatchUseCase(
        repository, mock_user_directory, mock_channel, ReminderMessageComposer(), clock=lambda: now
    )

    # Act
    await dispatch.process_bucket(TimingSlot.MORNING)
    morning = mock_channel.send.call_args.args[0].text
    await dispatch.process_bucket(TimingSlot.NIGHT)
    night = mock_channel.send.call_args.args[0].text

    # Assert
    assert "Losartan" in morning and "Aspirin" in morning
    assert "Losartan" in night and "Aspirin" not in night


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
async def test_pricing_last_line_hides_artifact_from_patient(
    repository, mock_payload_repository, sample_payload
):
    """Test that pricing the last line hides the artifact from the patient only."""
    # Arrange
    mock_payload_repository.find_by_prescription_id.return_value = sample_payload
    reader = GetPayloadUseCase(mock_payload_repository, repository)

    # Act
    before = await reader.execute(1, ViewerRole.PATIENT)
    result = await ApplyAmountsUseCase(repository).execute(
        ApplyAmountsRequest(prescription_id=1, line_amounts={2: Decimal("12")})
    )
    after_patient = await reader.execute(1, ViewerRole.PATIENT)
    after_admin = await reader.execute(1, ViewerRole.ADMIN)

    # Assert
    assert before.artifact is not None
    assert result.all_priced is True
    assert after_patient.artifact is None
    assert after_admin.artifact == sample_payload.artifact
