"""
Prescription Domain Layer
"""
