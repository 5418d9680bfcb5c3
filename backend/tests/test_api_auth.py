"""Account and authentication API tests."""

import pytest
from fastapi.testclient import TestClient

from grinfood.main import create_app
from grinfood.services.container import assemble_services

from tests.conftest import MANAGER_UID, OTHER_UID, USER_UID, make_settings
from tests.fakes import FakePaymentGateway, FakeSmsVerifier, seed

SIGNUP = {"name": "Taras", "email": "taras@grinfood.ua", "password": "secret123"}


class TestSignup:
    def test_creates_user_with_default_role(self, client, store):
        resp = client.post("/api/signup", json=SIGNUP)

        assert resp.status_code == 201
        data = resp.json()
        assert data["message"] == "User created"
        assert data["user"]["email"] == "taras@grinfood.ua"
        assert data["user"]["displayName"] == "Taras"
        assert data["token"] == f"custom-{data['user']['uid']}"
        assert store.collection("roles")._docs[data["user"]["uid"]] == {"role": "user"}

    def test_self_assigned_manager_rejected(self, client, identity):
        resp = client.post("/api/signup", json={**SIGNUP, "role": "manager"})

        assert resp.status_code == 403
        assert resp.json()["kind"] == "insufficient_role"
        assert not any(u.email == SIGNUP["email"] for u in identity.users.values())

    def test_self_assigned_manager_allowed_by_setting(self, store, identity, email_sender):
        services = assemble_services(
            make_settings(allow_self_assigned_manager=True),
            store=store, identity=identity, payments=FakePaymentGateway(),
            sms=FakeSmsVerifier(), email_sender=email_sender,
        )
        client = TestClient(create_app(services), raise_server_exceptions=False)

        resp = client.post("/api/signup", json={**SIGNUP, "role": "manager"})

        assert resp.status_code == 201
        uid = resp.json()["user"]["uid"]
        assert store.collection("roles")._docs[uid] == {"role": "manager"}

    @pytest.mark.parametrize("missing", ["name", "email", "password"])
    def test_required_fields(self, client, missing):
        body = {k: v for k, v in SIGNUP.items() if k != missing}
        resp = client.post("/api/signup", json=body)
        assert resp.status_code == 400
        assert resp.json()["kind"] == "validation_error"

    def test_duplicate_email(self, client):
        resp = client.post("/api/signup", json={**SIGNUP, "email": "user@grinfood.ua"})
        assert resp.status_code == 400


class TestSignin:
    def test_known_email(self, client):
        resp = client.post("/api/signin", json={"email": "user@grinfood.ua"})
        assert resp.status_code == 200
        assert resp.json()["token"] == f"custom-{USER_UID}"

    def test_unknown_email(self, client):
        resp = client.post("/api/signin", json={"email": "ghost@grinfood.ua"})
        assert resp.status_code == 404


class TestCredentialErrors:
    def test_missing_token(self, client):
        resp = client.get("/api/check-auth")
        assert resp.status_code == 403
        assert resp.json() == {"error": "No token provided", "kind": "no_credential"}

    def test_invalid_token(self, client):
        resp = client.get("/api/check-auth", headers={"Authorization": "Bearer forged"})
        assert resp.status_code == 403
        assert resp.json()["kind"] == "invalid_credential"

    def test_wrong_scheme(self, client):
        resp = client.get("/api/check-auth", headers={"Authorization": "Basic user-token"})
        assert resp.json()["kind"] == "no_credential"

    def test_provider_outage_is_500(self, client, identity, user_headers):
        identity.unavailable = True
        resp = client.get("/api/check-auth", headers=user_headers)
        assert resp.status_code == 500
        assert resp.json()["kind"] == "collaborator_failure"

    def test_insufficient_role_is_distinct(self, client, user_headers):
        resp = client.get("/api/promotions/all", headers=user_headers)
        assert resp.status_code == 403
        assert resp.json()["kind"] == "insufficient_role"


class TestIdentityEndpoints:
    def test_check_auth(self, client, user_headers):
        resp = client.get("/api/check-auth", headers=user_headers)
        assert resp.json() == {"message": "Authorized", "uid": USER_UID}

    def test_get_role(self, client, manager_headers, other_headers):
        assert client.get("/api/get-role", headers=manager_headers).json() == {"role": "manager"}
        assert client.get("/api/get-role", headers=other_headers).json() == {"role": "user"}

    def test_update_email(self, client, identity, user_headers):
        resp = client.post("/api/update-email", json={"newEmail": "new@grinfood.ua"}, headers=user_headers)
        assert resp.status_code == 200
        assert identity.users[USER_UID].email == "new@grinfood.ua"

    def test_check_user_exists(self, client, user_headers, other_headers):
        assert client.get("/api/check-user-exists", headers=user_headers).json() == {"exists": True}
        # OTHER_UID has no role assignment
        assert client.get("/api/check-user-exists", headers=other_headers).status_code == 404

    def test_check_user_by_email(self, client):
        assert client.post("/api/check-user-by-email", json={"email": "user@grinfood.ua"}).status_code == 200
        assert client.post("/api/check-user-by-email", json={"email": "no@grinfood.ua"}).status_code == 404

    def test_public_display_name(self, client):
        assert client.get(f"/api/user/{USER_UID}").json() == {"name": "Olena"}
        assert client.get(f"/api/user/{OTHER_UID}").json() == {"name": "other@grinfood.ua"}
        assert client.get("/api/user/ghost").json() == {"name": "Anonymous"}


class TestEmails:
    def test_forgot_password_sends_reset_link(self, client, email_sender, identity):
        resp = client.post("/api/forgot-password", json={"email": "user@grinfood.ua"})

        assert resp.status_code == 200
        [message] = email_sender.messages
        assert message["to"] == "user@grinfood.ua"
        assert identity.reset_links[0][1].replace("&", "&amp;") in message["html"]

    def test_send_verification_email_requires_token(self, client):
        assert client.post("/api/send-verification-email").status_code == 403

    def test_send_verification_email(self, client, email_sender, user_headers):
        resp = client.post("/api/send-verification-email", headers=user_headers)
        assert resp.status_code == 200
        assert email_sender.messages[0]["to"] == "user@grinfood.ua"

    def test_notify_profile_updated_escapes_name(self, client, email_sender, user_headers):
        resp = client.post(
            "/api/notify-profile-updated",
            json={"email": "user@grinfood.ua", "name": "<b>Olena</b>"},
            headers=user_headers,
        )
        assert resp.status_code == 200
        assert "&lt;b&gt;Olena&lt;/b&gt;" in email_sender.messages[0]["html"]

    def test_check_email_verified_own_or_manage(self, client, user_headers, manager_headers):
        own = client.get(f"/api/check-email-verified/{USER_UID}", headers=user_headers)
        assert own.json() == {"email": "user@grinfood.ua", "emailVerified": False}
        assert client.get(f"/api/check-email-verified/{OTHER_UID}", headers=user_headers).status_code == 403
        assert client.get(f"/api/check-email-verified/{OTHER_UID}", headers=manager_headers).status_code == 200


class TestAccountDeletion:
    def test_delete_own_account(self, client, store, identity, user_headers):
        seed(store, "orders", "o1", {"userId": USER_UID})
        seed(store, "reviews", "r1", {"userId": USER_UID})

        resp = client.post("/api/delete-user", headers=user_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert body["complete"] is True
        assert body["ordersDeleted"] == 1
        assert body["reviewsDeleted"] == 1
        assert USER_UID not in identity.users
        # The token no longer resolves
        assert client.get("/api/check-auth", headers=user_headers).json()["kind"] == "invalid_credential"

    def test_user_cannot_delete_someone_else(self, client, identity, user_headers):
        resp = client.delete(f"/api/users/{OTHER_UID}", headers=user_headers)
        assert resp.status_code == 403
        assert OTHER_UID in identity.users

    def test_manager_can_delete_anyone(self, client, identity, manager_headers):
        resp = client.delete(f"/api/users/{OTHER_UID}", headers=manager_headers)
        assert resp.status_code == 200
        assert OTHER_UID not in identity.users

    def test_owner_can_delete_by_id(self, client, identity, user_headers):
        assert client.delete(f"/api/users/{USER_UID}", headers=user_headers).status_code == 200

    def test_incomplete_purge_reported(self, client, services, manager_headers):
        async def broken_batch_delete(doc_ids):
            from grinfood.core.errors import CollaboratorFailure
            raise CollaboratorFailure("store unavailable")

        services.store.collection("orders").batch_delete = broken_batch_delete

        resp = client.delete(f"/api/users/{OTHER_UID}", headers=manager_headers)

        assert resp.status_code == 500
        body = resp.json()
        assert body["kind"] == "purge_incomplete"
        assert body["details"]["failures"] == ["orders"]

    def test_delete_requires_token(self, client):
        assert client.post("/api/delete-user").status_code == 403
        assert client.delete(f"/api/users/{MANAGER_UID}").status_code == 403
