from dpms.domains.prescriptions.infrastructure.scheduler.reminder_scheduler import MedicationReminderScheduler

__all__ = ["MedicationReminderScheduler"]
