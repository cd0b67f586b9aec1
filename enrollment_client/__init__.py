"""
Enrollment Client

Remote-config bootstrap and synchronized HTTP endpoint for the biometric
enrollment app.
"""

from .app import EnrollmentApp

__all__ = ["EnrollmentApp"]

__version__ = "1.0.0"
