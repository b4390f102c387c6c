from datetime import timedelta

from app.models import FriendRequest
from app.utils.time import utcnow


def as_user(user_id):
    return {"X-User-ID": user_id}


def send(client, sender, recipient):
    return client.post(f"/api/users/friend-request/{recipient}", headers=as_user(sender))


def test_requires_authentication(client, alice):
    response = client.get("/api/users/friend-requests")

    assert response.status_code == 401


def test_unknown_x_user_id_is_rejected(client, alice):
    response = client.get("/api/users/friend-requests", headers=as_user("mallory"))

    assert response.status_code == 401


def test_send_friend_request(client, alice, bob):
    response = send(client, "alice", "bob")

    assert response.status_code == 201
    body = response.json()
    assert body["sender_id"] == "alice"
    assert body["recipient_id"] == "bob"
    assert body["status"] == "pending"
    assert body["recipient"]["full_name"] == "Bob Builder"
    assert body["recipient"]["learning_language"] == "spanish"
    assert response.headers["X-Request-ID"]


def test_error_kinds_map_to_status_codes(client, alice, bob, carol):
    assert send(client, "alice", "alice").status_code == 400
    assert send(client, "alice", "nobody").status_code == 404

    request_id = send(client, "alice", "bob").json()["id"]
    duplicate = send(client, "bob", "alice")
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "conflict"

    forbidden = client.put(f"/api/users/friend-request/{request_id}/accept", headers=as_user("carol"))
    assert forbidden.status_code == 403
    assert forbidden.json() == {
        "detail": "You are not authorized to respond to this request",
        "error": "forbidden",
    }

    missing = client.put("/api/users/friend-request/does-not-exist/reject", headers=as_user("bob"))
    assert missing.status_code == 404


def test_accept_flow(client, alice, bob):
    request_id = send(client, "alice", "bob").json()["id"]

    response = client.put(f"/api/users/friend-request/{request_id}/accept", headers=as_user("bob"))

    assert response.status_code == 200
    assert response.json() == {"message": "Friend request accepted", "status": "accepted"}

    again = client.put(f"/api/users/friend-request/{request_id}/accept", headers=as_user("bob"))
    assert again.status_code == 409

    friends_of_alice = client.get("/api/users/friends", headers=as_user("alice")).json()
    friends_of_bob = client.get("/api/users/friends", headers=as_user("bob")).json()
    assert [f["id"] for f in friends_of_alice] == ["bob"]
    assert [f["id"] for f in friends_of_bob] == ["alice"]

    assert send(client, "alice", "bob").status_code == 409


def test_reject_then_resend_revives_same_request(client, alice, bob):
    request_id = send(client, "alice", "bob").json()["id"]

    rejected = client.put(f"/api/users/friend-request/{request_id}/reject", headers=as_user("bob"))
    assert rejected.json() == {"message": "Friend request rejected", "status": "rejected"}

    resent = send(client, "alice", "bob")
    assert resent.status_code == 201
    assert resent.json()["id"] == request_id
    assert resent.json()["status"] == "pending"


def test_friend_requests_overview(client, db, alice, bob, carol):
    incoming_id = send(client, "carol", "alice").json()["id"]
    accepted_id = send(client, "alice", "bob").json()["id"]
    client.put(f"/api/users/friend-request/{accepted_id}/accept", headers=as_user("bob"))

    response = client.get("/api/users/friend-requests", headers=as_user("alice"))

    assert response.status_code == 200
    body = response.json()
    assert [r["id"] for r in body["incoming"]] == [incoming_id]
    assert body["incoming"][0]["sender"]["full_name"] == "Carol Danvers"
    assert [r["id"] for r in body["accepted"]] == [accepted_id]
    assert body["accepted"][0]["recipient"]["id"] == "bob"

    # Once the acceptance is older than a day it drops out of the overview
    db.query(FriendRequest).filter(FriendRequest.id == accepted_id).update(
        {"updated_at": utcnow() - timedelta(hours=25)}, synchronize_session=False
    )
    db.commit()
    body = client.get("/api/users/friend-requests", headers=as_user("alice")).json()
    assert body["accepted"] == []


def test_outgoing_friend_requests(client, alice, bob, carol):
    to_bob = send(client, "alice", "bob").json()["id"]
    to_carol = send(client, "alice", "carol").json()["id"]
    client.put(f"/api/users/friend-request/{to_carol}/reject", headers=as_user("carol"))

    response = client.get("/api/users/outgoing-friend-requests", headers=as_user("alice"))

    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == [to_bob]
    assert client.get("/api/users/outgoing-friend-requests", headers=as_user("bob")).json() == []
