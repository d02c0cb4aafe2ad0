from datetime import timedelta

import pytest

from weshare.auth.schemas import PhoneLoginRequest, SignupRequest
from weshare.auth.service import UserService
from weshare.auth.utils import create_access_token, verify_token
from weshare.exceptions import Conflict, Unauthorized, ValidationError
from conftest import departure_in

PNG = b"\x89PNG\r\n\x1a\n" + b"1" * 32


class TestUserService:
    def test_signup_normalises_phone(self, db):
        user = UserService.signup(db, SignupRequest(phone="0788 555 111", name=" Alice "))
        assert user.phone == "+250788555111"
        assert user.name == "Alice"
        assert user.role == "PASSENGER"
        assert user.phone_verified is True

    def test_signup_duplicate_in_other_format(self, db):
        UserService.signup(db, SignupRequest(phone="+250788555112", name="Alice"))
        with pytest.raises(Conflict):
            UserService.signup(db, SignupRequest(phone="0788555112", name="Alice Again"))

    def test_invalid_phone(self, db):
        with pytest.raises(ValidationError) as exc:
            UserService.signup(db, SignupRequest(phone="12345", name="Bob"))
        assert exc.value.details[0]["field"] == "phone"

    @pytest.mark.parametrize("role", ["AGENCY", "DRIVER", "ADMIN", "SUPER_ADMIN"])
    def test_signup_ignores_requested_role(self, db, role):
        user = UserService.signup(db, SignupRequest(phone="0788555113", name="Mallory", role=role))
        assert user.role == "PASSENGER"

    def test_login_creates_then_reuses(self, db):
        user, created = UserService.login(db, PhoneLoginRequest(phone="0788555114", name="Carol"))
        assert created is True
        again, created_again = UserService.login(db, PhoneLoginRequest(phone="250788555114", name="Other Name"))
        assert created_again is False
        assert again.id == user.id
        assert again.name == "Carol"


class TestTokens:
    def test_round_trip(self):
        token = create_access_token(data={"sub": "42", "role": "PASSENGER"})
        assert verify_token(token)["user_id"] == 42

    def test_expired(self):
        token = create_access_token(data={"sub": "42"}, expires_delta=timedelta(seconds=-5))
        with pytest.raises(Unauthorized) as exc:
            verify_token(token)
        assert "expired" in exc.value.message

    def test_tampered(self):
        token = create_access_token(data={"sub": "42"})
        with pytest.raises(Unauthorized):
            verify_token(token[:-2] + ("AA" if not token.endswith("AA") else "BB"))

    def test_non_numeric_subject(self):
        token = create_access_token(data={"sub": "alice"})
        with pytest.raises(Unauthorized):
            verify_token(token)


class TestAuthApi:
    def test_signup_and_me(self, client):
        response = client.post("/api/v1/auth/signup", json={"phone": "0788555120", "name": "Dana"})
        assert response.status_code == 201
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["phone"] == "+250788555120"
        assert "OTP" in body["message"]

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["name"] == "Dana"

    def test_duplicate_signup_is_conflict(self, client):
        client.post("/api/v1/auth/signup", json={"phone": "0788555121", "name": "Eve"})
        response = client.post("/api/v1/auth/signup", json={"phone": "0788555121", "name": "Eve"})
        assert response.status_code == 409
        assert response.json()["kind"] == "conflict"

    def test_signup_cannot_become_agency(self, client):
        response = client.post(
            "/api/v1/auth/signup",
            json={"phone": "0788555123", "name": "Fake Express", "role": "AGENCY"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["user"]["role"] == "PASSENGER"

        trip_date, trip_time = departure_in(72)
        posted = client.post(
            "/api/v1/bus-trips",
            json={
                "depart_city": "Kigali",
                "destination_city": "Huye",
                "date": trip_date.isoformat(),
                "time": trip_time,
                "total_seats": 30,
                "price": 3500,
            },
            headers={"Authorization": f"Bearer {body['access_token']}"},
        )
        assert posted.status_code == 403
        assert posted.json()["kind"] == "forbidden"

    def test_login(self, client):
        response = client.post("/api/v1/auth/login", json={"phone": "0788555122", "name": "Frank"})
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "PASSENGER"

    def test_bad_token(self, client):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_deleted_user_token(self, client, db, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user)
        db.delete(user)
        db.commit()
        assert client.get("/api/v1/auth/me", headers=headers).status_code == 401


class TestProfile:
    def test_profile_reports_verification(self, client, make_user, auth_headers):
        verified = make_user(role="DRIVER", driver_verified=True)
        plain = make_user(role="DRIVER")
        assert client.get("/api/v1/profile", headers=auth_headers(verified)).json()["is_verified"] is True
        assert client.get("/api/v1/profile", headers=auth_headers(plain)).json()["is_verified"] is False

    def test_admins_count_as_verified(self, client, make_user, auth_headers):
        admin = make_user(role="ADMIN")
        assert client.get("/api/v1/profile", headers=auth_headers(admin)).json()["is_verified"] is True

    def test_image_upload_and_fetch(self, client, make_user, auth_headers):
        user = make_user()
        upload = client.post(
            "/api/v1/profile/image",
            files={"file": ("me.png", PNG, "image/png")},
            headers=auth_headers(user),
        )
        assert upload.status_code == 200
        assert upload.json()["profile_image_url"] == f"profile/{user.id}.png"

        image = client.get(f"/api/v1/profile/image/{user.id}")
        assert image.status_code == 200
        assert image.content == PNG
        assert image.headers["content-type"] == "image/png"

    def test_image_type_is_checked(self, client, make_user, auth_headers):
        response = client.post(
            "/api/v1/profile/image",
            files={"file": ("me.gif", b"GIF89a", "image/gif")},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 400

    def test_missing_image(self, client, make_user):
        assert client.get(f"/api/v1/profile/image/{make_user().id}").status_code == 404
