"""
API Service - Enrollment Backend Access

Responsibilities:
- Long-lived HTTP client whose base URL follows shared config state
- Typed error taxonomy for failed requests
- Request/response logging hook
- Enrollment, lookup and document request functions
"""

from .client import ApiResponse, HttpClient
from .endpoints import API_ENDPOINTS
from .hooks import LoggingRequestLogger, RequestLogger
from .enrollment import (
    BiometricEnrollmentRequest,
    EnrollmentResult,
    UserLookup,
    UserRegistration,
    check_user_exists,
    create_user,
    enroll_biometrics,
    get_user_profile,
    submit_biometric_enrollment,
    submit_face_enrollment,
    submit_fingerprint_enrollment,
    upload_document,
    verify_document,
)

__all__ = [
    "ApiResponse",
    "HttpClient",
    "API_ENDPOINTS",
    "LoggingRequestLogger",
    "RequestLogger",
    "BiometricEnrollmentRequest",
    "EnrollmentResult",
    "UserLookup",
    "UserRegistration",
    "check_user_exists",
    "create_user",
    "enroll_biometrics",
    "get_user_profile",
    "submit_biometric_enrollment",
    "submit_face_enrollment",
    "submit_fingerprint_enrollment",
    "upload_document",
    "verify_document",
]
