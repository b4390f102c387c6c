from unittest.mock import MagicMock, patch

from app import crud


def as_user(user_id):
    return {"X-User-ID": user_id}


class TestAuth:

    def test_me(self, client, alice):
        response = client.get("/api/auth/me", headers=as_user("alice"))

        assert response.status_code == 200
        assert response.json()["full_name"] == "Alice Liddell"
        assert response.json()["is_onboarded"] is True

    def test_invalid_bearer_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401

    def test_valid_bearer_token_creates_user(self, client, db):
        decoded = {"uid": "firebase-uid", "email": "fresh@example.com", "name": "Fresh Face"}
        with patch("app.auth.auth.verify_id_token", return_value=decoded) as verify:
            response = client.get("/api/auth/me", headers={"Authorization": "Bearer good-token"})

        verify.assert_called_once_with("good-token")
        assert response.status_code == 200
        assert response.json()["id"] == "firebase-uid"
        assert response.json()["is_onboarded"] is False
        assert crud.get_user(db, "firebase-uid").email == "fresh@example.com"

    def test_update_profile(self, client, alice):
        response = client.put("/api/auth/me", json={"bio": "Down the rabbit hole"}, headers=as_user("alice"))

        assert response.status_code == 200
        assert response.json()["bio"] == "Down the rabbit hole"
        assert response.json()["full_name"] == "Alice Liddell"

    def test_update_profile_rejects_blank_name(self, client, alice):
        response = client.put("/api/auth/me", json={"full_name": "   "}, headers=as_user("alice"))

        assert response.status_code == 422

    def test_update_profile_rejects_null_name(self, client, alice):
        response = client.put("/api/auth/me", json={"full_name": None}, headers=as_user("alice"))

        assert response.status_code == 422
        profile = client.get("/api/auth/me", headers=as_user("alice")).json()
        assert profile["full_name"] == "Alice Liddell"


class TestOnboarding:

    def test_onboarding_completes_profile(self, client, make_user):
        make_user("newbie", onboarded=False)
        payload = {
            "full_name": "Newbie",
            "bio": "Learning every day",
            "native_language": "english",
            "learning_language": "french",
            "location": "Lyon",
        }

        response = client.post("/api/auth/onboarding", json=payload, headers=as_user("newbie"))

        assert response.status_code == 200
        assert response.json()["is_onboarded"] is True
        assert response.json()["location"] == "Lyon"

    def test_onboarding_requires_all_fields(self, client, make_user):
        make_user("newbie", onboarded=False)

        response = client.post("/api/auth/onboarding", json={"full_name": "Newbie"}, headers=as_user("newbie"))

        assert response.status_code == 400
        assert "location" in response.json()["detail"]


class TestRecommended:

    def test_recommended_excludes_friends(self, client, db, alice, bob, carol, make_user):
        make_user("newbie", onboarded=False)
        crud.add_friend(db, "alice", "bob")
        db.commit()

        response = client.get("/api/users/recommended", headers=as_user("alice"))

        assert response.status_code == 200
        assert [u["id"] for u in response.json()] == ["carol"]


class TestNudge:

    def test_nudge_friend_sends_email(self, client, db, alice, bob):
        crud.add_friend(db, "alice", "bob")
        db.commit()
        sender = MagicMock()

        with patch("app.routers.users.create_email_sender", return_value=sender):
            response = client.post("/api/users/bob/nudge", headers=as_user("alice"))

        assert response.status_code == 200
        assert response.json() == {"message": "Emergency nudge sent to Bob Builder."}
        to_email, subject, body = sender.send_email.call_args.args
        assert to_email == "bob@example.com"
        assert subject == "Urgent: Alice Liddell is trying to reach you!"
        assert "Hello Bob Builder" in body

    def test_nudge_requires_friendship(self, client, alice, bob):
        sender = MagicMock()

        with patch("app.routers.users.create_email_sender", return_value=sender):
            response = client.post("/api/users/bob/nudge", headers=as_user("alice"))

        assert response.status_code == 403
        sender.send_email.assert_not_called()

    def test_nudge_unknown_user(self, client, alice):
        response = client.post("/api/users/ghost/nudge", headers=as_user("alice"))

        assert response.status_code == 404

    def test_nudge_self(self, client, alice):
        response = client.post("/api/users/alice/nudge", headers=as_user("alice"))

        assert response.status_code == 400

    def test_email_failure_is_reported(self, client, db, alice, bob):
        crud.add_friend(db, "alice", "bob")
        db.commit()
        sender = MagicMock()
        sender.send_email.side_effect = RuntimeError("Mailgun send email failed: 500")

        with patch("app.routers.users.create_email_sender", return_value=sender):
            response = client.post("/api/users/bob/nudge", headers=as_user("alice"))

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to send emergency nudge"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
