"""
Medication reminder e-mail layout.
"""

from dataclasses import dataclass
from html import escape

from dpms.domains.prescriptions.application.ports import OutboundMessage
from dpms.domains.prescriptions.domain.entities import MedicationLine, UserProfile
from dpms.domains.prescriptions.domain.value_objects import TimingSlot

REMINDER_SUBJECT = "💊 Medication Reminder - Time to Take Your Medicine"


@dataclass(frozen=True)
class ReminderTemplate:
    """Subject, plain-text and HTML bodies filled with ``str.format``."""

    subject_template: str
    text_template: str
    html_template: str


MEDICATION_REMINDER = ReminderTemplate(
    subject_template=REMINDER_SUBJECT,
    text_template="""Medication Reminder

Hello {patient_name},

This is a friendly reminder that it's time to take your medication!

Your Medications:
{medication_list}

Timing: {timing_label}

Important: Please take your medications as prescribed by your doctor.

Stay healthy!

---
Digital Prescription Management System
""",
    html_template="""<!DOCTYPE html>
<html>
<head>
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 20px; text-align: center; border-radius: 10px 10px 0 0; }}
    .content {{ background: #f9f9f9; padding: 30px; border-radius: 0 0 10px 10px; }}
    .medication-box {{ background: white; padding: 15px; margin: 10px 0; border-left: 4px solid #667eea; border-radius: 5px; }}
    .timing-badge {{ display: inline-block; background: #667eea; color: white; padding: 5px 15px; border-radius: 20px; }}
    .footer {{ text-align: center; margin-top: 20px; color: #666; font-size: 12px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header"><h1>💊 Medication Reminder</h1></div>
    <div class="content">
      <p>Hello <strong>{patient_name}</strong>,</p>
      <p>This is a friendly reminder that it's time to take your medication!</p>
      <div class="medication-box">
        <h3 style="margin-top: 0; color: #667eea;">📋 Your Medications:</h3>
        <pre style="white-space: pre-wrap; font-family: Arial, sans-serif;">{medication_list}</pre>
      </div>
      <p><strong>⏰ Timing:</strong> <span class="timing-badge">{timing_label}</span></p>
      <p style="background: #fff3cd; padding: 15px; border-radius: 5px; border-left: 4px solid #ffc107;">
        <strong>⚠️ Important:</strong> Please take your medications as prescribed by your doctor.
        If you have any questions or concerns, please contact your healthcare provider.
      </p>
      <p>Stay healthy! 💚</p>
      <div class="footer">
        <p>This is an automated reminder from Digital Prescription Management System</p>
        <p>Please do not reply to this email.</p>
      </div>
    </div>
  </div>
</body>
</html>
""",
)


def format_medication_list(lines: list[MedicationLine]) -> str:
    """One ``• name (dosage)`` bullet per line."""
    bullets = []
    for line in lines:
        name = line.medicine.name if line.medicine else "Medicine"
        dosage = line.medicine.dosage if line.medicine and line.medicine.dosage else "N/A"
        bullets.append(f"• {name} ({dosage})")
    return "\n".join(bullets)


class ReminderMessageComposer:
    """
    Builds the reminder e-mail for one patient and one timing slot.

    Only the lines passed in are listed; callers filter by slot.
    """

    def __init__(self, template: ReminderTemplate = MEDICATION_REMINDER):
        self.template = template

    def compose(self, recipient: UserProfile, timing: TimingSlot, lines: list[MedicationLine]) -> OutboundMessage:
        medication_list = format_medication_list(lines)
        text_context = {
            "patient_name": recipient.name,
            "medication_list": medication_list,
            "timing_label": timing.label,
        }
        html_context = {key: escape(value) for key, value in text_context.items()}

        return OutboundMessage(
            to=recipient.email or "",
            subject=self.template.subject_template.format(**text_context),
            text=self.template.text_template.format(**text_context),
            html=self.template.html_template.format(**html_context),
        )
