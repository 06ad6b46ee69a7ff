"""
Prescription HTTP API
"""

from dpms.domains.prescriptions.api.routes import router

__all__ = ["router"]
