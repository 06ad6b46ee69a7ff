"""
Prescriptions Domain

Prescriptions, scannable payloads with role-based visibility, pharmacy
pricing and timed medication reminders.
"""
