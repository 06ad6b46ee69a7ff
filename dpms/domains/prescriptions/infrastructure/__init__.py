"""Prescription infrastructure adapters."""
