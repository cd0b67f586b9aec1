"""
Enrollment API

Typed request functions used by the app screens. They only ever talk to
the backend through HttpClient, so they always hit the currently
resolved base URL.

A 404 on user lookup is a normal outcome (the user is not enrolled yet);
every other failure is raised as an ApiError subclass.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from enrollment_client.common.exceptions import NotFoundError
from enrollment_client.common.logging_setup import get_service_logger

from .client import HttpClient
from .endpoints import API_ENDPOINTS

logger = get_service_logger("api.enrollment")

ENROLLMENT_TYPES = ("face", "fingerprint", "both")


@dataclass
class UserLookup:
    """Result of checking whether a registration exists on the server"""
    registration_id: str
    exists: bool
    status: int
    message: str = ""
    data: Any = None


@dataclass
class UserRegistration:
    """Body of POST /users/"""
    registration_id: str
    name: str
    center_code: str = ""
    document_image: str = ""
    portrait_image: str = ""
    scanned_json: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "center_code": self.center_code,
            "document_image": self.document_image,
            "name": self.name,
            "portrait_image": self.portrait_image,
            "registration_id": self.registration_id,
            "scanned_json": self.scanned_json,
        }


@dataclass
class BiometricEnrollmentRequest:
    """Body of POST /biometric/enrollment"""
    enrollment_type: str
    user_id: str | None = None
    face_image_base64: str | None = None
    fingerprint_data: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.enrollment_type not in ENROLLMENT_TYPES:
            raise ValueError(
                f"enrollment_type must be one of {ENROLLMENT_TYPES}, "
                f"got {self.enrollment_type!r}"
            )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"enrollmentType": self.enrollment_type}
        if self.user_id is not None:
            payload["userId"] = self.user_id
        if self.face_image_base64 is not None:
            payload["faceImageBase64"] = self.face_image_base64
        if self.fingerprint_data is not None:
            payload["fingerprintData"] = self.fingerprint_data
        if self.metadata:
            payload["metadata"] = self.metadata
        return payload


@dataclass
class EnrollmentResult:
    """Server acknowledgement of an enrollment or upload"""
    success: bool
    message: str = ""
    data: dict[str, Any] | None = None

    @classmethod
    def from_body(cls, body: Any) -> "EnrollmentResult":
        if not isinstance(body, dict):
            return cls(success=True, data=None)
        return cls(
            success=bool(body.get("success", body.get("status") == "success")),
            message=str(body.get("message", "")),
            data=body.get("data"),
        )


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


async def check_user_exists(client: HttpClient, registration_id: str) -> UserLookup:
    """
    Check whether a registration is known to the server.

    exists is True only for a body with status "success" whose message
    does not say the user does not exist. A 404 is exists=False.
    """
    path = API_ENDPOINTS["USER_BY_REGISTRATION"].format(
        registration_id=quote(registration_id, safe="")
    )

    try:
        response = await client.get(path)
    except NotFoundError as e:
        logger.info(
            f"User {registration_id} not found",
            extra={"registration_id": registration_id},
        )
        message = e.body.get("message", "") if isinstance(e.body, dict) else ""
        return UserLookup(
            registration_id=registration_id,
            exists=False,
            status=404,
            message=str(message),
            data=e.body,
        )

    body = response.data if isinstance(response.data, dict) else {}
    message = str(body.get("message") or "")

    exists = body.get("status") == "success" and "does not exist" not in message.lower()

    return UserLookup(
        registration_id=registration_id,
        exists=exists,
        status=response.status,
        message=message,
        data=response.data,
    )


async def create_user(client: HttpClient, registration: UserRegistration) -> EnrollmentResult:
    """Register the scanned document holder"""
    response = await client.post(API_ENDPOINTS["USERS"], json=registration.to_payload())
    logger.info(
        f"User {registration.registration_id} registered",
        extra={"registration_id": registration.registration_id},
    )
    return EnrollmentResult.from_body(response.data)


async def enroll_biometrics(
    client: HttpClient,
    registration_id: str,
    face: str | None,
    fingerprints: list[Any],
) -> EnrollmentResult:
    """Enroll face and fingerprint templates for a registered user"""
    payload = {
        "biometric_data": {
            "biometrics": {
                "face": face,
                "fingerprints": fingerprints,
            },
        },
        "registration_id": registration_id,
    }
    response = await client.post(API_ENDPOINTS["BIOMETRIC_ENROLL"], json=payload)
    return EnrollmentResult.from_body(response.data)


async def submit_biometric_enrollment(
    client: HttpClient,
    request: BiometricEnrollmentRequest,
) -> EnrollmentResult:
    response = await client.post(
        API_ENDPOINTS["BIOMETRIC_ENROLLMENT"], json=request.to_payload()
    )
    return EnrollmentResult.from_body(response.data)


async def submit_face_enrollment(
    client: HttpClient,
    face_image_base64: str,
    user_id: str | None = None,
) -> EnrollmentResult:
    response = await client.post(
        API_ENDPOINTS["FACE_ENROLLMENT"],
        json={
            "userId": user_id,
            "faceImageBase64": face_image_base64,
            "timestamp": _now_iso(),
        },
    )
    return EnrollmentResult.from_body(response.data)


async def submit_fingerprint_enrollment(
    client: HttpClient,
    fingerprint_data: str,
    user_id: str | None = None,
) -> EnrollmentResult:
    response = await client.post(
        API_ENDPOINTS["FINGERPRINT_ENROLLMENT"],
        json={
            "userId": user_id,
            "fingerprintData": fingerprint_data,
            "timestamp": _now_iso(),
        },
    )
    return EnrollmentResult.from_body(response.data)


async def upload_document(
    client: HttpClient,
    registration_id: str,
    document_image_base64: str,
    document_type: str | None = None,
) -> EnrollmentResult:
    payload = {
        "registration_id": registration_id,
        "document_image": document_image_base64,
        "timestamp": _now_iso(),
    }
    if document_type:
        payload["document_type"] = document_type

    response = await client.post(API_ENDPOINTS["DOCUMENT_UPLOAD"], json=payload)
    return EnrollmentResult.from_body(response.data)


async def verify_document(
    client: HttpClient,
    registration_id: str,
    document_image_base64: str,
) -> EnrollmentResult:
    response = await client.post(
        API_ENDPOINTS["DOCUMENT_VERIFY"],
        json={
            "registration_id": registration_id,
            "document_image": document_image_base64,
        },
    )
    return EnrollmentResult.from_body(response.data)


async def get_user_profile(client: HttpClient, user_id: str) -> dict[str, Any]:
    response = await client.get(API_ENDPOINTS["USER_PROFILE"], params={"userId": user_id})
    return response.data if isinstance(response.data, dict) else {}
