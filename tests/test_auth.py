import redis

from hms.core.redis import LoginThrottle
from hms.models.audit_log import AuditLog
from hms.models.user import User
from tests.conftest import PASSWORD

SETUP_BODY = {
    "email": "Owner@HMSPlatform.ng",
    "password": "Str0ngSetup!",
    "firstName": "Platform",
    "lastName": "Owner",
}


def login(client, email, password=PASSWORD):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def test_setup_runs_once(client, db):
    first = client.post("/api/v1/auth/setup", json=SETUP_BODY)
    assert first.status_code == 201
    body = first.json()
    assert body["user"]["role"] == "SUPER_ADMIN"
    assert body["user"]["email"] == "owner@hmsplatform.ng"
    assert body["user"]["hospitalId"] is None
    assert body["accessToken"] and body["refreshToken"]

    second = client.post("/api/v1/auth/setup", json={**SETUP_BODY, "email": "intruder@example.ng"})
    assert second.status_code == 403
    assert second.json()["message"] == "Setup already completed. Users already exist."

    assert db.query(User).count() == 1
    assert db.query(AuditLog).filter(AuditLog.action == "SETUP_SUPER_ADMIN").count() == 1


def test_setup_refused_when_users_exist(client, doctor):
    response = client.post("/api/v1/auth/setup", json=SETUP_BODY)
    assert response.status_code == 403


def test_login_and_me(client, doctor):
    response = login(client, doctor.email)
    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["role"] == "DOCTOR"
    assert "hashedPassword" not in body["user"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["user"]["id"] == str(doctor.id)


def test_login_with_wrong_password(client, doctor):
    response = login(client, doctor.email, "wrong-password")
    assert response.status_code == 401
    assert response.json() == {"error": "unauthenticated", "message": "Invalid credentials"}


def test_inactive_user_cannot_log_in(client, db, doctor):
    doctor.active = False
    db.commit()

    assert login(client, doctor.email).status_code == 401


def test_refresh_rotates_token(client, doctor):
    tokens = login(client, doctor.email).json()

    rotated = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert rotated.status_code == 200
    new_refresh = rotated.json()["refreshToken"]
    assert new_refresh != tokens["refreshToken"]

    reused = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert reused.status_code == 401

    again = client.post("/api/v1/auth/refresh", json={"refreshToken": new_refresh})
    assert again.status_code == 200


def test_access_token_is_not_a_refresh_token(client, doctor):
    tokens = login(client, doctor.email).json()

    response = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["accessToken"]})
    assert response.status_code == 401


def test_logout_revokes_refresh_token(client, doctor):
    tokens = login(client, doctor.email).json()
    headers = {"Authorization": f"Bearer {tokens['accessToken']}"}

    response = client.post("/api/v1/auth/logout", headers=headers, json={"refreshToken": tokens["refreshToken"]})
    assert response.status_code == 200

    reused = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert reused.status_code == 401


def test_change_password(client, doctor, auth_headers):
    wrong = client.post(
        "/api/v1/auth/change-password",
        headers=auth_headers(doctor),
        json={"oldPassword": "not-it", "newPassword": "N3wPassw0rd!"},
    )
    assert wrong.status_code == 401

    ok = client.post(
        "/api/v1/auth/change-password",
        headers=auth_headers(doctor),
        json={"oldPassword": PASSWORD, "newPassword": "N3wPassw0rd!"},
    )
    assert ok.status_code == 200

    assert login(client, doctor.email).status_code == 401
    assert login(client, doctor.email, "N3wPassw0rd!").status_code == 200


class FakeRedis:
    def __init__(self, fail=False):
        self.counts = {}
        self.expiries = {}
        self.fail = fail

    def incr(self, key):
        if self.fail:
            raise redis.ConnectionError("connection refused")
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    def expire(self, key, seconds):
        self.expiries[key] = seconds

    def delete(self, key):
        self.counts.pop(key, None)

    def close(self):
        pass


def test_login_throttle_counts_per_key():
    throttle = LoginThrottle(FakeRedis(), limit=2, window_seconds=60)

    assert throttle.hit("10.0.0.1")
    assert throttle.hit("10.0.0.1")
    assert not throttle.hit("10.0.0.1")
    assert throttle.hit("10.0.0.2")
    assert throttle.client.expiries["hms:login-attempts:10.0.0.1"] == 60

    throttle.reset("10.0.0.1")
    assert throttle.hit("10.0.0.1")


def test_login_throttle_degrades_open():
    assert LoginThrottle(None, limit=1, window_seconds=60).hit("k")
    failing = LoginThrottle(FakeRedis(fail=True), limit=1, window_seconds=60)
    assert failing.hit("k")
    assert failing.hit("k")


def test_throttled_login_is_429(client, services, doctor):
    services.login_throttle = LoginThrottle(FakeRedis(), limit=1, window_seconds=60)

    assert login(client, doctor.email, "bad").status_code == 401
    response = login(client, doctor.email)
    assert response.status_code == 429
