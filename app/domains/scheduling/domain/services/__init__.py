"""
Scheduling Domain Services
"""

from .availability_service import AvailabilityService, AvailableSlot, WorkingHours

__all__ = [
    "AvailabilityService",
    "AvailableSlot",
    "WorkingHours",
]
