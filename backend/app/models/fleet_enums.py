"""
Vehicle and driver availability enumerations.
"""

import enum


class VehicleAvailability(str, enum.Enum):
    """Vehicle available_status values."""
    AVAILABLE = "Available"
    ON_BOOKING = "On Booking"


class DriverStatus(str, enum.Enum):
    """Driver status values."""
    AVAILABLE = "Available"
    NOT_AVAILABLE = "Not Available"
