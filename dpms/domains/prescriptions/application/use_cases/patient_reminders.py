"""
Patient Reminders Use Case
"""

from dpms.domains.prescriptions.application.dto import PatientReminders, ReminderEntry
from dpms.domains.prescriptions.application.ports import IPrescriptionRepository
from dpms.domains.prescriptions.domain.value_objects import ordered_slots

NOT_AVAILABLE = "N/A"


class GetPatientRemindersUseCase:
    """
    Group a patient's scheduled medications into morning/afternoon/night.

    Only active prescriptions with an issued payload count, newest first.
    """

    def __init__(self, prescription_repository: IPrescriptionRepository):
        self.prescription_repo = prescription_repository

    async def execute(self, patient_id: int) -> PatientReminders:
        reminders = PatientReminders()
        prescriptions = await self.prescription_repo.find_issued_for_patient(patient_id)

        for prescription in prescriptions:
            for line in prescription.medications:
                entry = ReminderEntry(
                    prescription_id=prescription.id,
                    disease=prescription.disease,
                    medicine_name=line.medicine.name if line.medicine else NOT_AVAILABLE,
                    dosage=line.medicine.dosage if line.medicine else NOT_AVAILABLE,
                    date=prescription.issued_at,
                )
                for slot in ordered_slots(line.timing):
                    reminders.bucket(slot).append(entry)

        return reminders
