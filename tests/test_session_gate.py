from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import httpx
from fastapi import Body, Request
from fastapi.testclient import TestClient

from rijig_web.api.deps import get_api_client
from rijig_web.api.token_refresh import setup_token_refresh
from rijig_web.infrastructure.clients.rijig_api_client import (
    RijigApiClient,
    RijigApiClientSettings,
)
from rijig_web.main import create_app
from rijig_web.shared.config import Settings


PREFIX = "/apirijig/v2"

SETTINGS = Settings(
    rijig_api_base_url=f"https://api.rijig.test{PREFIX}",
    rijig_api_key="",
    rijig_api_timeout_seconds=5,
    session_secret="test-secret",
    session_cookie_name="__rijig_session",
    session_max_age_seconds=3600,
    app_env="test",
    log_level="WARNING",
)

ADMIN_SESSION = {
    "accessToken": "access-1",
    "refreshToken": "refresh-1",
    "sessionId": "session-1",
    "role": "administrator",
    "email": "admin@rijig.id",
    "tokenType": "full",
    "registrationStatus": "complete",
}


def _ok(data=None, message: str = "OK") -> dict:
    return {"meta": {"status": 200, "message": message}, "data": data}


class FakeRijigApi:
    """Routes (method, path) to a handler returning a response, recording every request."""

    def __init__(self):
        self.routes: dict[tuple[str, str], object] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, handler) -> None:
        self.routes[(method, path)] = handler

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and request.url.path == f"{PREFIX}{path}"
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path.removeprefix(PREFIX)))
        if handler is None:
            return httpx.Response(404, json={"meta": {"status": 404, "message": "Not found"}})
        return handler(request)


def _json(data=None, *, status_code: int = 200, message: str = "OK"):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"meta": {"status": status_code, "message": message}, "data": data})

    return handler


def _build(api: FakeRijigApi) -> TestClient:
    root = RijigApiClient(
        RijigApiClientSettings(
            base_url=SETTINGS.rijig_api_base_url,
            api_key="",
            timeout_seconds=SETTINGS.rijig_api_timeout_seconds,
        ),
        transport=httpx.MockTransport(api),
    )
    setup_token_refresh(root)
    app = create_app(SETTINGS)
    app.dependency_overrides[get_api_client] = root.fork

    def seed_session(request: Request, payload: dict = Body(...)):
        request.session.clear()
        request.session.update(payload)
        return {"ok": True}

    def dump_session(request: Request):
        return dict(request.session)

    app.add_api_route("/test/seed-session", seed_session, methods=["POST"])
    app.add_api_route("/test/session", dump_session, methods=["GET"])
    return TestClient(app, follow_redirects=False)


def _seed(client: TestClient, payload: dict) -> None:
    assert client.post("/test/seed-session", json=payload).status_code == 200


def _stored_session(client: TestClient) -> dict:
    return client.get("/test/session").json()


def _pengelola_session(status: str, token_type: str = "full") -> dict:
    return {
        "accessToken": "access-1",
        "refreshToken": "refresh-1",
        "sessionId": "session-1",
        "role": "pengelola",
        "phone": "6281234567890",
        "tokenType": token_type,
        "registrationStatus": status,
    }


def _pending_users(*user_ids: str, role: str, total: int, pengelola: int, pengepul: int):
    return _json(
        {
            "users": [
                {
                    "id": user_id,
                    "phone": "6281234567890",
                    "role": {"role_name": role},
                    "registration_status": "awaiting_approval",
                    "registration_progress": 2,
                    "submitted_at": "2024-05-01T08:00:00Z",
                    "step_info": {"step": 2, "status": "awaiting_approval", "description": "Menunggu"},
                }
                for user_id in user_ids
            ],
            "pagination": {"page": 1, "limit": 20},
            "summary": {"total_pending": total, "pengelola_pending": pengelola, "pengepul_pending": pengepul},
        }
    )


def _pending_board_api(api: FakeRijigApi) -> None:
    def pending(request: httpx.Request) -> httpx.Response:
        if request.url.params["role"] == "pengelola":
            return _pending_users("u-1", "u-2", role="pengelola", total=5, pengelola=2, pengepul=3)(request)
        return _pending_users("u-3", "u-4", "u-5", role="pengepul", total=5, pengelola=2, pengepul=3)(request)

    api.on("GET", "/needapprove/pending", pending)


def test_anonymous_visitor_is_sent_to_root():
    client = _build(FakeRijigApi())

    response = client.get("/pengelola/dashboard")

    assert response.status_code == 302
    assert response.headers["location"] == "/"


def test_administrator_cannot_open_pengelola_dashboard():
    client = _build(FakeRijigApi())
    _seed(client, ADMIN_SESSION)

    response = client.get("/pengelola/dashboard")

    assert response.status_code == 302
    assert response.headers["location"] == "/"


def test_pengelola_cannot_open_admin_panel():
    client = _build(FakeRijigApi())
    _seed(client, _pengelola_session("complete"))

    response = client.get("/sys-rijig-adminpanel/dashboard/users")

    assert response.status_code == 302
    assert response.headers["location"] == "/"


def test_unfinished_onboarding_is_sent_to_the_current_step():
    client = _build(FakeRijigApi())

    _seed(client, _pengelola_session("uncomplete", token_type="partial"))
    assert client.get("/pengelola/dashboard").headers["location"] == "/authpengelola/completingcompanyprofile"

    _seed(client, _pengelola_session("approved", token_type="partial"))
    assert client.get("/pengelola/dashboard").headers["location"] == "/authpengelola/createanewpin"

    _seed(client, _pengelola_session("awaiting_approval", token_type="partial"))
    assert client.get("/pengelola/dashboard").headers["location"] == "/authpengelola/waitingapprovalfromadministrator"


def test_partial_token_must_verify_pin_before_dashboard():
    client = _build(FakeRijigApi())
    _seed(client, _pengelola_session("complete", token_type="partial"))

    response = client.get("/pengelola/dashboard")

    assert response.status_code == 302
    assert response.headers["location"] == "/authpengelola/verifyexistingpin"


def test_completed_pengelola_reaches_dashboard():
    client = _build(FakeRijigApi())
    _seed(client, _pengelola_session("complete"))

    response = client.get("/pengelola/dashboard")

    assert response.status_code == 200
    assert response.json()["role"] == "pengelola"
    assert response.json()["phone"] == "6281234567890"


def test_admin_sign_in_and_otp_create_session():
    api = FakeRijigApi()
    api.on("POST", "/auth/login/admin", _json({"message": "OTP", "expires_in_seconds": 300, "remaining_time": "4:59"}))
    api.on(
        "POST",
        "/auth/verify-otp-admin",
        _json({"message": "OK", "access_token": "access-1", "refresh_token": "refresh-1", "session_id": "s-1", "token_type": "full"}),
    )
    _pending_board_api(api)
    client = _build(api)

    sign_in = client.post(
        "/sys-rijig-administrator/sign-infirst",
        data={"email": "Admin@Rijig.id", "password": "Rahasia1!"},
    )
    assert sign_in.status_code == 302
    location = urlparse(sign_in.headers["location"])
    assert location.path == "/sys-rijig-administrator/emailotpverifyrequired"
    query = parse_qs(location.query)
    assert query["email"] == ["admin@rijig.id"]
    assert query["remaining_time"] == ["4:59"]

    page = client.get(sign_in.headers["location"])
    assert page.status_code == 200
    assert page.json()["device_id"] == query["device_id"][0]

    verified = client.post(
        "/sys-rijig-administrator/emailotpverifyrequired",
        data={"otp": "1234", "email": "admin@rijig.id", "device_id": query["device_id"][0], "_action": "verify"},
    )
    assert verified.status_code == 302
    assert verified.headers["location"] == "/sys-rijig-adminpanel/dashboard"

    dashboard = client.get("/sys-rijig-adminpanel/dashboard")
    assert dashboard.status_code == 200
    assert dashboard.json()["email"] == "admin@rijig.id"

    users = client.get("/sys-rijig-adminpanel/dashboard/users")
    assert users.status_code == 200
    assert users.json()["totals"] == {"pengelola": 2, "pengepul": 3, "total": 5}
    assert api.calls("GET", "/needapprove/pending")[0].headers["Authorization"] == "Bearer access-1"

    # Signed-in administrators skip the sign-in page.
    assert client.get("/sys-rijig-administrator/sign-infirst").headers["location"] == "/sys-rijig-adminpanel/dashboard"


def test_admin_sign_in_reports_field_errors():
    client = _build(FakeRijigApi())

    response = client.post("/sys-rijig-administrator/sign-infirst", data={"email": "bukan-email", "password": ""})

    assert response.status_code == 400
    assert set(response.json()["errors"]) == {"email", "password"}


def test_admin_sign_in_formats_remaining_time_from_expiry():
    api = FakeRijigApi()
    api.on("POST", "/auth/login/admin", _json({"message": "OTP", "expires_in_seconds": 125}))
    client = _build(api)

    sign_in = client.post(
        "/sys-rijig-administrator/sign-infirst",
        data={"email": "admin@rijig.id", "password": "Rahasia1!"},
    )

    assert parse_qs(urlparse(sign_in.headers["location"]).query)["remaining_time"] == ["2:05"]


def test_admin_register_sends_normalised_form_and_reports_email_sent():
    api = FakeRijigApi()
    api.on("POST", "/auth/register/admin", _json({"message": "Cek email", "expires_in_seconds": 300}))
    client = _build(api)

    response = client.post(
        "/sys-rijig-administrator/register",
        data={
            "name": "Admin Rijig",
            "gender": "laki-laki",
            "dateofbirth": "1990-07-04",
            "placeofbirth": "Bandung",
            "phone": "6281234567890",
            "email": "Admin@Rijig.id",
            "password": "Rahasia1!",
            "password_confirm": "Rahasia1!",
        },
    )

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Cek email",
        "email": "admin@rijig.id",
        "remaining_time": "5:00",
    }
    sent = api.calls("POST", "/auth/register/admin")[0]
    assert "Authorization" not in sent.headers
    assert b'"dateofbirth":"04-07-1990"' in sent.content.replace(b" ", b"")


def test_admin_register_reports_field_errors_without_calling_the_api():
    api = FakeRijigApi()
    client = _build(api)

    response = client.post("/sys-rijig-administrator/register", data={"email": "bukan-email"})

    assert response.status_code == 400
    assert "email" in response.json()["errors"]
    assert api.requests == []


def test_admin_forgot_password_reports_upstream_error_on_email():
    api = FakeRijigApi()
    api.on("POST", "/auth/forgot-password", _json(status_code=404, message="Email tidak terdaftar"))
    client = _build(api)

    response = client.post("/sys-rijig-administrator/forgot-password", data={"email": "admin@rijig.id"})

    assert response.status_code == 404
    assert response.json()["errors"] == {"email": "Email tidak terdaftar"}


def test_admin_forgot_password_reports_email_sent():
    api = FakeRijigApi()
    api.on("POST", "/auth/forgot-password", _json({"message": "Link terkirim", "expires_in_seconds": 600}))
    client = _build(api)

    response = client.post("/sys-rijig-administrator/forgot-password", data={"email": "admin@rijig.id"})

    assert response.status_code == 200
    assert response.json()["remaining_time"] == "10:00"


def test_admin_reset_password_from_link_returns_to_sign_in():
    api = FakeRijigApi()
    api.on("POST", "/auth/reset-password", _json())
    client = _build(api)

    response = client.post(
        "/sys-rijig-administrator/reset-password",
        data={
            "reset_link": "https://rijig.id/reset-password?token=tok-1&email=admin%40rijig.id",
            "new_password": "Baru1234!",
            "confirm_password": "Baru1234!",
        },
    )

    assert response.status_code == 302
    assert response.headers["location"] == "/sys-rijig-administrator/sign-infirst?email=admin%40rijig.id"
    assert len(api.calls("POST", "/auth/reset-password")) == 1


def test_admin_verify_email_link_returns_to_sign_in():
    api = FakeRijigApi()
    api.on("POST", "/auth/verify-email", _json())
    client = _build(api)

    response = client.get("/sys-rijig-administrator/verify-email", params={"email": "admin@rijig.id", "token": "tok-1"})

    assert response.status_code == 302
    assert response.headers["location"] == "/sys-rijig-administrator/sign-infirst?email=admin%40rijig.id"

    incomplete = client.get("/sys-rijig-administrator/verify-email", params={"email": "admin@rijig.id"})
    assert incomplete.status_code == 400


def test_refreshed_tokens_are_written_back_to_the_cookie():
    api = FakeRijigApi()

    def pending(request: httpx.Request) -> httpx.Response:
        if request.headers.get("Authorization") != "Bearer access-2":
            return httpx.Response(401, json={"meta": {"status": 401, "message": "Token expired"}})
        return _pending_users(role="pengelola", total=0, pengelola=0, pengepul=0)(request)

    api.on("GET", "/needapprove/pending", pending)
    api.on("POST", "/auth/refresh-token", _json({"access_token": "access-2", "refresh_token": "refresh-2"}))
    client = _build(api)
    _seed(client, ADMIN_SESSION)

    first = client.get("/sys-rijig-adminpanel/dashboard/users")
    second = client.get("/sys-rijig-adminpanel/dashboard/users")

    assert first.status_code == 200
    assert second.status_code == 200
    assert len(api.calls("POST", "/auth/refresh-token")) == 1
    # The second request starts with the refreshed token taken from the cookie.
    assert [request.headers["Authorization"] for request in api.calls("GET", "/needapprove/pending")][-2:] == [
        "Bearer access-2",
        "Bearer access-2",
    ]


def test_tokens_refreshed_during_pin_verification_survive_the_session_write():
    api = FakeRijigApi()

    def verify_pin(request: httpx.Request) -> httpx.Response:
        if request.headers.get("Authorization") != "Bearer access-2":
            return httpx.Response(401, json={"meta": {"status": 401, "message": "Token expired"}})
        return _json({"token_type": "full"})(request)

    api.on("POST", "/pin/verif", verify_pin)
    api.on("POST", "/auth/refresh-token", _json({"access_token": "access-2", "refresh_token": "refresh-2"}))
    client = _build(api)
    _seed(client, _pengelola_session("complete", token_type="partial"))

    response = client.post("/authpengelola/verifyexistingpin", data={"pin": "123456"})

    assert response.headers["location"] == "/pengelola/dashboard"
    stored = _stored_session(client)
    assert stored["accessToken"] == "access-2"
    assert stored["refreshToken"] == "refresh-2"
    assert stored["tokenType"] == "full"


def test_tokens_returned_by_the_api_win_over_refreshed_ones():
    api = FakeRijigApi()

    def create_pin(request: httpx.Request) -> httpx.Response:
        if request.headers.get("Authorization") != "Bearer access-2":
            return httpx.Response(401, json={"meta": {"status": 401, "message": "Token expired"}})
        return _json({"access_token": "access-3", "registration_status": "complete", "token_type": "full"})(request)

    api.on("POST", "/pin/create", create_pin)
    api.on("POST", "/auth/refresh-token", _json({"access_token": "access-2", "refresh_token": "refresh-2"}))
    client = _build(api)
    _seed(client, _pengelola_session("approved", token_type="partial"))

    client.post("/authpengelola/createanewpin", data={"pin": "123456", "confirm_pin": "123456"})

    stored = _stored_session(client)
    assert stored["accessToken"] == "access-3"
    assert stored["refreshToken"] == "refresh-2"
    assert stored["registrationStatus"] == "complete"


def test_failed_refresh_clears_session_and_redirects_to_sign_in():
    api = FakeRijigApi()
    api.on("GET", "/needapprove/pending", _json(status_code=401, message="Token expired"))
    api.on("POST", "/auth/refresh-token", _json(status_code=401, message="Refresh token revoked"))
    client = _build(api)
    _seed(client, ADMIN_SESSION)

    response = client.get("/sys-rijig-adminpanel/dashboard/users")

    assert response.status_code == 302
    assert response.headers["location"] == "/sys-rijig-administrator/sign-infirst"
    assert client.get("/").json()["authenticated"] is False


def test_logout_ignores_remote_failure_and_clears_session():
    api = FakeRijigApi()
    api.on("POST", "/auth/logout", _json(status_code=500, message="Server error"))
    client = _build(api)
    _seed(client, ADMIN_SESSION)

    response = client.post("/action/logout")

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert api.calls("POST", "/auth/logout")[0].headers["Authorization"] == "Bearer access-1"
    assert client.get("/").json() == {"authenticated": False, "session": None, "next_path": None}


def test_logout_without_session_skips_remote_logout():
    api = FakeRijigApi()
    client = _build(api)

    response = client.post("/action/logout")

    assert response.status_code == 302
    assert response.headers["location"] == "/"
    assert api.calls("POST", "/auth/logout") == []


def test_logout_page_is_not_found():
    client = _build(FakeRijigApi())

    assert client.get("/action/logout").status_code == 404


def test_approval_action_removes_user_when_confirmed():
    api = FakeRijigApi()
    _pending_board_api(api)
    api.on(
        "POST",
        "/needapprove/approval-action",
        _json({"user_id": "u-1", "action": "approved", "previous_status": "awaiting_approval", "new_status": "approved"}),
    )
    client = _build(api)
    _seed(client, ADMIN_SESSION)

    response = client.post("/sys-rijig-adminpanel/dashboard/users/approval", data={"user_id": "u-1", "action": "approved"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["new_status"] == "approved"
    assert body["board"]["totals"] == {"pengelola": 1, "pengepul": 3, "total": 4}
    assert [user["id"] for user in body["board"]["pengelola_users"]] == ["u-2"]


def test_approval_action_rolls_back_when_rejected_by_server():
    api = FakeRijigApi()
    _pending_board_api(api)
    api.on("POST", "/needapprove/approval-action", _json(status_code=500, message="Server error"))
    client = _build(api)
    _seed(client, ADMIN_SESSION)

    response = client.post("/sys-rijig-adminpanel/dashboard/users/approval", data={"user_id": "u-1", "action": "approved"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Gagal menyetujui pengguna"
    assert body["board"]["totals"]["total"] == 5
    assert [user["id"] for user in body["board"]["pengelola_users"]] == ["u-1", "u-2"]


def test_pengelola_registration_walks_through_onboarding():
    api = FakeRijigApi()
    api.on("POST", "/auth/request-otp/register", _json(message="OTP dikirim"))
    api.on(
        "POST",
        "/auth/verif-otp/register",
        _json(
            {
                "access_token": "access-1",
                "refresh_token": "refresh-1",
                "session_id": "s-1",
                "token_type": "partial",
                "registration_status": "uncomplete",
            }
        ),
    )
    api.on("POST", "/companyprofile/create", _json({"access_token": "access-2", "registration_status": "awaiting_approval"}))
    api.on(
        "GET",
        "/auth/cekapproval",
        _json({"message": "Disetujui", "registration_status": "approved", "next_step": "create_pin", "access_token": "access-3"}),
    )
    api.on("POST", "/pin/create", _json({"access_token": "access-4", "registration_status": "complete", "token_type": "full"}))
    client = _build(api)

    invalid = client.post("/authpengelola/requestotpforregister", data={"phone": "0812"})
    assert invalid.status_code == 400
    assert "phone" in invalid.json()["errors"]

    requested = client.post("/authpengelola/requestotpforregister", data={"phone": "6281234567890"})
    assert requested.headers["location"] == "/authpengelola/verifyotptoregister?phone=6281234567890"

    verified = client.post(
        "/authpengelola/verifyotptoregister",
        data={"phone": "6281234567890", "otp": "1234", "_action": "verify"},
    )
    assert verified.headers["location"] == "/authpengelola/completingcompanyprofile"
    assert client.get("/pengelola/dashboard").headers["location"] == "/authpengelola/completingcompanyprofile"

    profile = client.post(
        "/authpengelola/completingcompanyprofile",
        data={
            "companyname": "PT Rijig Bersih",
            "companyaddress": "Jl. Merdeka 1",
            "companyphone": "6281234567890",
            "companyemail": "halo@rijig.id",
            "companytype": "PT",
        },
        files={"company_logo": ("logo.png", b"png-bytes", "image/png")},
    )
    assert profile.headers["location"] == "/authpengelola/waitingapprovalfromadministrator"
    assert api.calls("POST", "/companyprofile/create")[0].headers["Authorization"] == "Bearer access-1"

    # The profile step is closed once it has been submitted.
    again = client.post("/authpengelola/completingcompanyprofile", data={"companyname": "PT Lain"})
    assert again.headers["location"] == "/authpengelola/waitingapprovalfromadministrator"

    approved = client.post("/authpengelola/waitingapprovalfromadministrator")
    assert approved.headers["location"] == "/authpengelola/createanewpin"

    pin = client.post("/authpengelola/createanewpin", data={"pin": "123456", "confirm_pin": "123456"})
    assert pin.headers["location"] == "/pengelola/dashboard"
    assert api.calls("POST", "/pin/create")[0].headers["Authorization"] == "Bearer access-3"

    dashboard = client.get("/pengelola/dashboard")
    assert dashboard.status_code == 200
    assert dashboard.json()["registration_status"] == "complete"
    assert dashboard.json()["token_type"] == "full"


def test_waiting_for_approval_reports_pending_state():
    api = FakeRijigApi()
    api.on("GET", "/auth/cekapproval", _json({"message": "Masih menunggu", "registration_status": "awaiting_approval"}))
    client = _build(api)
    _seed(client, _pengelola_session("awaiting_approval", token_type="partial"))

    response = client.post("/authpengelola/waitingapprovalfromadministrator")

    assert response.status_code == 200
    assert response.json()["approved"] is False
    assert response.json()["message"] == "Masih menunggu"


def test_otp_page_requires_phone():
    client = _build(FakeRijigApi())

    assert client.get("/authpengelola/verifyotptologin").headers["location"] == "/authpengelola/requestotpforlogin"
    page = client.get("/authpengelola/verifyotptologin", params={"phone": "6281234567890"})
    assert page.status_code == 200
    assert page.json()["expiry_minutes"] == 5


def test_upstream_otp_error_is_reported_on_the_otp_field():
    api = FakeRijigApi()
    api.on("POST", "/auth/verif-otp", _json(status_code=401, message="Kode OTP tidak valid"))
    client = _build(api)

    response = client.post(
        "/authpengelola/verifyotptologin",
        data={"phone": "6281234567890", "otp": "9999", "_action": "verify"},
    )

    # OTP verification runs before any session exists, so its 401 is a wrong code.
    assert response.status_code == 401
    assert response.json()["errors"] == {"otp": "Kode OTP tidak valid"}
    assert api.calls("POST", "/auth/refresh-token") == []
