"""
Scheduling Application Services
"""

from .appointment_side_effects import AppointmentSideEffects

__all__ = ["AppointmentSideEffects"]
