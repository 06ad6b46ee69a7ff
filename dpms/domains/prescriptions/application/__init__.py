"""Prescription application layer."""
