from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app.crud import user as user_crud
from app.crud.friends import FriendRequestLedger
from app.database import get_session_local
from app.exceptions import ConflictError, ForbiddenError, InvalidOperationError, NotFoundError
from app.models import FriendRequest, Friendship
from app.models.friend_request import make_pair_key
from app.utils.time import utcnow


def _age_request(db, request_id, hours):
    db.query(FriendRequest).filter(FriendRequest.id == request_id).update(
        {"updated_at": utcnow() - timedelta(hours=hours)}, synchronize_session=False
    )
    db.commit()


class TestSendFriendRequest:

    def test_creates_pending_request(self, db, alice, bob):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")

        assert req.id
        assert req.sender_id == "alice"
        assert req.recipient_id == "bob"
        assert req.status == "pending"
        assert req.pair_key == make_pair_key("bob", "alice")
        assert req.created_at is not None and req.updated_at is not None

    def test_self_request_is_invalid(self, db, alice):
        with pytest.raises(InvalidOperationError):
            FriendRequestLedger.send_friend_request(db, "alice", "alice")

    def test_unknown_recipient(self, db, alice):
        with pytest.raises(NotFoundError):
            FriendRequestLedger.send_friend_request(db, "alice", "nobody")

    @pytest.mark.parametrize("second_sender,second_recipient", [("alice", "bob"), ("bob", "alice")])
    def test_duplicate_pending_conflicts_in_either_direction(self, db, alice, bob, second_sender, second_recipient):
        first = FriendRequestLedger.send_friend_request(db, "alice", "bob")

        with pytest.raises(ConflictError):
            FriendRequestLedger.send_friend_request(db, second_sender, second_recipient)

        db.refresh(first)
        assert first.status == "pending"
        assert db.query(FriendRequest).count() == 1

    def test_already_friends_without_any_request(self, db, alice, bob):
        user_crud.add_friend(db, "alice", "bob")
        db.commit()

        with pytest.raises(ConflictError, match="already friends"):
            FriendRequestLedger.send_friend_request(db, "bob", "alice")
        assert db.query(FriendRequest).count() == 0

    def test_revives_rejected_request_in_new_direction(self, db, alice, bob):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")
        FriendRequestLedger.reject_friend_request(db, req.id, "bob")
        _age_request(db, req.id, hours=2)
        db.refresh(req)
        rejected_at = req.updated_at

        revived = FriendRequestLedger.send_friend_request(db, "bob", "alice")

        assert revived.id == req.id
        assert revived.status == "pending"
        assert revived.sender_id == "bob"
        assert revived.recipient_id == "alice"
        assert revived.updated_at > rejected_at
        assert db.query(FriendRequest).count() == 1

    def test_stale_reviver_loses_race(self, db, alice, bob):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")
        FriendRequestLedger.reject_friend_request(db, req.id, "bob")

        other_db = get_session_local()()
        try:
            # Load the request in the second session while it is still rejected
            assert FriendRequestLedger.get_friend_request(other_db, req.id).status == "rejected"

            FriendRequestLedger.send_friend_request(db, "bob", "alice")

            with pytest.raises(ConflictError):
                FriendRequestLedger.send_friend_request(other_db, "alice", "bob")
        finally:
            other_db.close()

        db.refresh(req)
        assert req.status == "pending"
        assert req.sender_id == "bob"
        assert req.recipient_id == "alice"
        assert db.query(FriendRequest).count() == 1


class TestAcceptFriendRequest:

    def test_accept_makes_friendship_both_ways(self, db, alice, bob):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")

        accepted = FriendRequestLedger.accept_friend_request(db, req.id, "bob")

        assert accepted.status == "accepted"
        assert user_crud.are_friends(db, "alice", "bob")
        assert user_crud.are_friends(db, "bob", "alice")
        assert [u.id for u in user_crud.get_friends(db, "alice")] == ["bob"]
        assert [u.id for u in user_crud.get_friends(db, "bob")] == ["alice"]

    def test_second_accept_conflicts(self, db, alice, bob):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")
        FriendRequestLedger.accept_friend_request(db, req.id, "bob")

        with pytest.raises(ConflictError):
            FriendRequestLedger.accept_friend_request(db, req.id, "bob")

    def test_accepting_rejected_request_conflicts(self, db, alice, bob):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")
        FriendRequestLedger.reject_friend_request(db, req.id, "bob")

        with pytest.raises(ConflictError):
            FriendRequestLedger.accept_friend_request(db, req.id, "bob")
        assert not user_crud.are_friends(db, "alice", "bob")

    def test_unknown_request(self, db, bob):
        with pytest.raises(NotFoundError):
            FriendRequestLedger.accept_friend_request(db, "missing-id", "bob")

    @pytest.mark.parametrize("final_state", ["pending", "accepted", "rejected"])
    def test_only_recipient_may_accept(self, db, alice, bob, carol, final_state):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")
        if final_state == "accepted":
            FriendRequestLedger.accept_friend_request(db, req.id, "bob")
        elif final_state == "rejected":
            FriendRequestLedger.reject_friend_request(db, req.id, "bob")

        for outsider in ("alice", "carol"):
            with pytest.raises(ForbiddenError):
                FriendRequestLedger.accept_friend_request(db, req.id, outsider)

    def test_failed_friendship_write_leaves_request_pending(self, db, alice, bob):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")
        failure = IntegrityError("INSERT INTO friendships", {}, Exception("unique_friendship"))

        with patch("app.crud.user.add_friend", side_effect=failure):
            with pytest.raises(ConflictError):
                FriendRequestLedger.accept_friend_request(db, req.id, "bob")

        db.refresh(req)
        assert req.status == "pending"
        assert db.query(Friendship).count() == 0
        assert not user_crud.are_friends(db, "alice", "bob")

    def test_stale_reader_loses_race(self, db, alice, bob):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")

        other_db = get_session_local()()
        try:
            # Load the request in the second session while it is still pending
            assert FriendRequestLedger.get_friend_request(other_db, req.id).status == "pending"

            FriendRequestLedger.accept_friend_request(db, req.id, "bob")

            with pytest.raises(ConflictError):
                FriendRequestLedger.reject_friend_request(other_db, req.id, "bob")
        finally:
            other_db.close()

        db.refresh(req)
        assert req.status == "accepted"
        assert user_crud.are_friends(db, "alice", "bob")


class TestRejectFriendRequest:

    def test_reject_sets_status_without_friendship(self, db, alice, bob):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")

        rejected = FriendRequestLedger.reject_friend_request(db, req.id, "bob")

        assert rejected.status == "rejected"
        assert not user_crud.are_friends(db, "alice", "bob")

    @pytest.mark.parametrize("first_action", ["accept", "reject"])
    def test_only_pending_may_be_rejected(self, db, alice, bob, first_action):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")
        if first_action == "accept":
            FriendRequestLedger.accept_friend_request(db, req.id, "bob")
        else:
            FriendRequestLedger.reject_friend_request(db, req.id, "bob")

        with pytest.raises(ConflictError):
            FriendRequestLedger.reject_friend_request(db, req.id, "bob")

    def test_sender_cannot_reject(self, db, alice, bob):
        req = FriendRequestLedger.send_friend_request(db, "alice", "bob")

        with pytest.raises(ForbiddenError):
            FriendRequestLedger.reject_friend_request(db, req.id, "alice")

    def test_unknown_request(self, db, bob):
        with pytest.raises(NotFoundError):
            FriendRequestLedger.reject_friend_request(db, "missing-id", "bob")


class TestListings:

    def test_incoming_and_outgoing(self, db, alice, bob, carol):
        to_bob = FriendRequestLedger.send_friend_request(db, "alice", "bob")
        carol_to_bob = FriendRequestLedger.send_friend_request(db, "carol", "bob")
        alice_to_carol = FriendRequestLedger.send_friend_request(db, "alice", "carol")
        FriendRequestLedger.reject_friend_request(db, alice_to_carol.id, "carol")

        incoming = FriendRequestLedger.get_incoming_requests(db, "bob")
        outgoing = FriendRequestLedger.get_outgoing_requests(db, "alice")

        assert {r.id for r in incoming} == {to_bob.id, carol_to_bob.id}
        assert {r.sender.full_name for r in incoming} == {"Alice Liddell", "Carol Danvers"}
        assert [r.id for r in outgoing] == [to_bob.id]
        assert outgoing[0].recipient.id == "bob"

    def test_incoming_skips_requests_from_deleted_users(self, db, alice, bob, carol):
        FriendRequestLedger.send_friend_request(db, "alice", "bob")
        from_carol = FriendRequestLedger.send_friend_request(db, "carol", "bob")

        # Raw delete leaves the request row dangling (SQLite does not enforce FKs here)
        db.execute(text("DELETE FROM users WHERE id = 'alice'"))
        db.commit()
        db.expire_all()

        incoming = FriendRequestLedger.get_incoming_requests(db, "bob")
        assert [r.id for r in incoming] == [from_carol.id]

    def test_recently_accepted_window(self, db, alice, bob, carol, make_user):
        make_user("dave")
        recent = FriendRequestLedger.send_friend_request(db, "alice", "bob")
        old = FriendRequestLedger.send_friend_request(db, "carol", "alice")
        pending = FriendRequestLedger.send_friend_request(db, "alice", "dave")
        FriendRequestLedger.accept_friend_request(db, recent.id, "bob")
        FriendRequestLedger.accept_friend_request(db, old.id, "alice")
        _age_request(db, recent.id, hours=23)
        _age_request(db, old.id, hours=25)

        accepted = FriendRequestLedger.get_recently_accepted_requests(db, "alice", 24)

        assert [r.id for r in accepted] == [recent.id]
        assert pending.id not in {r.id for r in accepted}
        # Visible to the recipient too
        assert [r.id for r in FriendRequestLedger.get_recently_accepted_requests(db, "bob", 24)] == [recent.id]
        # A wider window picks up the older one
        assert len(FriendRequestLedger.get_recently_accepted_requests(db, "alice", 48)) == 2


def test_full_lifecycle_scenario(db, alice, bob):
    req = FriendRequestLedger.send_friend_request(db, "alice", "bob")
    assert req.status == "pending"

    assert FriendRequestLedger.reject_friend_request(db, req.id, "bob").status == "rejected"

    revived = FriendRequestLedger.send_friend_request(db, "alice", "bob")
    assert revived.id == req.id
    assert revived.status == "pending"

    assert FriendRequestLedger.accept_friend_request(db, req.id, "bob").status == "accepted"
    assert user_crud.are_friends(db, "alice", "bob")

    with pytest.raises(ConflictError, match="already friends"):
        FriendRequestLedger.send_friend_request(db, "alice", "bob")


def test_storage_rejects_second_pending_request_for_pair(db, alice, bob):
    FriendRequestLedger.send_friend_request(db, "alice", "bob")

    db.add(FriendRequest(sender_id="bob", recipient_id="alice", pair_key=make_pair_key("alice", "bob"), status="pending"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_storage_allows_history_next_to_pending_request(db, alice, bob):
    req = FriendRequestLedger.send_friend_request(db, "alice", "bob")
    FriendRequestLedger.reject_friend_request(db, req.id, "bob")

    db.add(FriendRequest(sender_id="bob", recipient_id="alice", pair_key=make_pair_key("alice", "bob"), status="pending"))
    db.commit()

    assert db.query(FriendRequest).count() == 2
