"""
API Endpoints

Paths relative to the resolved API base URL.
"""

API_ENDPOINTS: dict[str, str] = {
    "BIOMETRIC_ENROLLMENT": "/biometric/enrollment",
    "BIOMETRIC_ENROLL": "/biometric/enroll",
    "FACE_ENROLLMENT": "/biometric/face",
    "FINGERPRINT_ENROLLMENT": "/biometric/fingerprint",

    "DOCUMENT_UPLOAD": "/document/upload",
    "DOCUMENT_VERIFY": "/document/verify",

    "USERS": "/users/",
    "USER_BY_REGISTRATION": "/users/{registration_id}",
    "USER_PROFILE": "/user/profile",
}
