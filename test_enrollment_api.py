"""
Enrollment API Tests

Call sites go through the HTTP client and see the resolved base URL.
"""

import json

import httpx
import pytest

from conftest import BASE_URL_KEY, DEFAULT_URL, REMOTE_URL
from enrollment_client.common.exceptions import (
    RequestTimeoutError,
    ServerResponseError,
    ServiceUnreachableError,
    describe_api_error,
)
from enrollment_client.services.api.enrollment import (
    BiometricEnrollmentRequest,
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


def sent_json(request: httpx.Request) -> dict:
    return json.loads(request.content)


@pytest.mark.asyncio
async def test_user_lookup_404_is_not_an_error(http_client, transport):
    transport.handler = lambda request: httpx.Response(404, json={"message": "Not found"})

    lookup = await check_user_exists(http_client, "123456")

    assert lookup.exists is False
    assert lookup.status == 404
    assert lookup.message == "Not found"
    assert str(transport.requests[0].url) == f"{DEFAULT_URL}/users/123456"


@pytest.mark.asyncio
async def test_user_lookup_timeout_is_unreachable(http_client, transport):
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    transport.handler = handler

    with pytest.raises(RequestTimeoutError) as exc_info:
        await check_user_exists(http_client, "123456")

    assert isinstance(exc_info.value, ServiceUnreachableError)
    assert describe_api_error(exc_info.value) != describe_api_error(ServerResponseError("x"))


@pytest.mark.asyncio
async def test_user_lookup_server_error_propagates(http_client, transport):
    transport.handler = lambda request: httpx.Response(500, json={"error": "db down"})

    with pytest.raises(ServerResponseError):
        await check_user_exists(http_client, "123456")


@pytest.mark.asyncio
async def test_user_lookup_success(http_client, transport):
    transport.handler = lambda request: httpx.Response(
        200, json={"status": "success", "message": "User found", "data": {"name": "A"}}
    )

    lookup = await check_user_exists(http_client, "123456")

    assert lookup.exists is True
    assert lookup.status == 200
    assert lookup.data["data"] == {"name": "A"}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"status": "error", "message": "lookup failed"},
    {"status": "success", "message": "User does not exist"},
    {},
    {"data": None},
    [],
    {"message": "ok"},
])
async def test_user_lookup_body_says_missing(http_client, transport, body):
    transport.handler = lambda request: httpx.Response(200, json=body)

    lookup = await check_user_exists(http_client, "123456")

    assert lookup.exists is False


@pytest.mark.asyncio
async def test_call_sites_follow_resolved_base_url(synchronizer, provider, http_client, transport):
    provider.publish({BASE_URL_KEY: REMOTE_URL})
    await synchronizer.bootstrap()

    await check_user_exists(http_client, "123456")

    assert str(transport.requests[0].url) == f"{REMOTE_URL}/users/123456"


@pytest.mark.asyncio
async def test_create_user(http_client, transport):
    transport.handler = lambda request: httpx.Response(
        201, json={"success": True, "message": "created"}
    )
    registration = UserRegistration(
        registration_id="123456",
        name="Jane Doe",
        center_code="C-01",
        scanned_json={"Name": "Jane Doe"},
    )

    result = await create_user(http_client, registration)

    request = transport.requests[0]
    assert request.method == "POST"
    assert str(request.url) == f"{DEFAULT_URL}/users/"
    assert sent_json(request) == registration.to_payload()
    assert result.success is True
    assert result.message == "created"


@pytest.mark.asyncio
async def test_enroll_biometrics_payload(http_client, transport):
    await enroll_biometrics(http_client, "123456", face="b64face", fingerprints=[{"pos": 1}])

    request = transport.requests[0]
    assert str(request.url) == f"{DEFAULT_URL}/biometric/enroll"
    assert sent_json(request) == {
        "biometric_data": {"biometrics": {"face": "b64face", "fingerprints": [{"pos": 1}]}},
        "registration_id": "123456",
    }


@pytest.mark.asyncio
async def test_submit_biometric_enrollment(http_client, transport):
    transport.handler = lambda request: httpx.Response(
        200, json={"success": True, "message": "ok", "data": {"enrollmentId": "e1"}}
    )

    result = await submit_biometric_enrollment(
        http_client,
        BiometricEnrollmentRequest(enrollment_type="face", user_id="u1", face_image_base64="img"),
    )

    assert sent_json(transport.requests[0]) == {
        "enrollmentType": "face",
        "userId": "u1",
        "faceImageBase64": "img",
    }
    assert result.data == {"enrollmentId": "e1"}


def test_biometric_enrollment_type_is_checked():
    with pytest.raises(ValueError):
        BiometricEnrollmentRequest(enrollment_type="iris")


@pytest.mark.asyncio
async def test_face_and_fingerprint_enrollment_paths(http_client, transport):
    await submit_face_enrollment(http_client, "face", user_id="u1")
    await submit_fingerprint_enrollment(http_client, "prints", user_id="u1")

    face, finger = transport.requests
    assert str(face.url) == f"{DEFAULT_URL}/biometric/face"
    assert sent_json(face)["faceImageBase64"] == "face"
    assert "timestamp" in sent_json(face)
    assert str(finger.url) == f"{DEFAULT_URL}/biometric/fingerprint"
    assert sent_json(finger)["fingerprintData"] == "prints"


@pytest.mark.asyncio
async def test_document_upload_and_verify(http_client, transport):
    await upload_document(http_client, "123456", "docimg", document_type="passport")
    await verify_document(http_client, "123456", "docimg")

    upload, verify = transport.requests
    assert str(upload.url) == f"{DEFAULT_URL}/document/upload"
    assert sent_json(upload)["document_type"] == "passport"
    assert str(verify.url) == f"{DEFAULT_URL}/document/verify"
    assert sent_json(verify) == {"registration_id": "123456", "document_image": "docimg"}


@pytest.mark.asyncio
async def test_get_user_profile(http_client, transport):
    transport.handler = lambda request: httpx.Response(200, json={"name": "Jane"})

    profile = await get_user_profile(http_client, "u1")

    assert profile == {"name": "Jane"}
    assert str(transport.requests[0].url) == f"{DEFAULT_URL}/user/profile?userId=u1"
