from sqlalchemy.orm import Session, joinedload, contains_eager
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_
from datetime import timedelta
from typing import List, Optional
from app.models.friend_request import FriendRequest, FriendRequestStatus, can_transition, make_pair_key
from app.crud import user as user_crud
from app.exceptions import InvalidOperationError, NotFoundError, ForbiddenError, ConflictError
from app.utils.logger import get_logger
from app.utils.time import utcnow

logger = get_logger(__name__)

PENDING = FriendRequestStatus.PENDING.value
ACCEPTED = FriendRequestStatus.ACCEPTED.value
REJECTED = FriendRequestStatus.REJECTED.value

class FriendRequestLedger:
    """
    Lifecycle of friend requests and the friendships they produce.

    Every status change is a compare-and-set on the current status, and the
    partial unique index on ``pair_key`` keeps a single pending request per
    pair, so concurrent callers lose with ``ConflictError`` instead of
    corrupting a record.
    """

    @staticmethod
    def send_friend_request(db: Session, sender_id: str, recipient_id: str) -> FriendRequest:
        """Send a friend request, reviving a previously rejected one for the same pair."""
        if sender_id == recipient_id:
            raise InvalidOperationError("You can't send a friend request to yourself")

        if not user_crud.user_exists(db, recipient_id):
            raise NotFoundError("Recipient not found")

        if user_crud.are_friends(db, sender_id, recipient_id):
            raise ConflictError("You are already friends with this user")

        pair_key = make_pair_key(sender_id, recipient_id)
        existing_requests = db.query(FriendRequest).filter(
            FriendRequest.pair_key == pair_key,
            FriendRequest.status.in_([PENDING, REJECTED])
        ).order_by(FriendRequest.updated_at.desc()).all()

        if any(req.status == PENDING for req in existing_requests):
            raise ConflictError("A friend request already exists between you and this user")

        rejected_request = existing_requests[0] if existing_requests else None
        try:
            if rejected_request:
                friend_request = FriendRequestLedger._revive(db, rejected_request, sender_id, recipient_id)
            else:
                friend_request = FriendRequest(
                    sender_id=sender_id,
                    recipient_id=recipient_id,
                    pair_key=pair_key,
                    status=PENDING
                )
                db.add(friend_request)
            db.commit()
        except IntegrityError:
            # Another request for this pair became pending first
            db.rollback()
            raise ConflictError("A friend request already exists between you and this user")

        db.refresh(friend_request)
        logger.info(f"Friend request {friend_request.id} pending: {sender_id} -> {recipient_id}")
        return friend_request

    @staticmethod
    def _revive(db: Session, friend_request: FriendRequest, sender_id: str, recipient_id: str) -> FriendRequest:
        """Turn a rejected request back into a pending one in the new direction."""
        FriendRequestLedger._compare_and_set(
            db, friend_request, REJECTED, PENDING,
            sender_id=sender_id, recipient_id=recipient_id
        )
        return friend_request

    @staticmethod
    def accept_friend_request(db: Session, request_id: str, acting_user_id: str) -> FriendRequest:
        """Accept a pending request and make both users friends in the same transaction."""
        friend_request = FriendRequestLedger._get_for_recipient(db, request_id, acting_user_id)
        FriendRequestLedger._ensure_transition(friend_request, ACCEPTED)

        try:
            FriendRequestLedger._compare_and_set(db, friend_request, PENDING, ACCEPTED)
            user_crud.add_friend(db, friend_request.sender_id, friend_request.recipient_id)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Integrity error accepting friend request {request_id}: {e}")
            raise ConflictError("Friend request was already processed")

        db.refresh(friend_request)
        logger.info(f"Friend request {request_id} accepted by {acting_user_id}")
        return friend_request

    @staticmethod
    def reject_friend_request(db: Session, request_id: str, acting_user_id: str) -> FriendRequest:
        """Reject a pending request. No friendship change."""
        friend_request = FriendRequestLedger._get_for_recipient(db, request_id, acting_user_id)
        FriendRequestLedger._ensure_transition(friend_request, REJECTED)

        FriendRequestLedger._compare_and_set(db, friend_request, PENDING, REJECTED)
        db.commit()

        db.refresh(friend_request)
        logger.info(f"Friend request {request_id} rejected by {acting_user_id}")
        return friend_request

    @staticmethod
    def get_incoming_requests(db: Session, user_id: str) -> List[FriendRequest]:
        """Pending requests addressed to the user whose sender still exists."""
        return db.query(FriendRequest).join(
            FriendRequest.sender
        ).filter(
            FriendRequest.recipient_id == user_id,
            FriendRequest.status == PENDING
        ).options(
            contains_eager(FriendRequest.sender)
        ).order_by(FriendRequest.created_at.desc(), FriendRequest.id).all()

    @staticmethod
    def get_outgoing_requests(db: Session, user_id: str) -> List[FriendRequest]:
        """Pending requests sent by the user."""
        return db.query(FriendRequest).filter(
            FriendRequest.sender_id == user_id,
            FriendRequest.status == PENDING
        ).options(
            joinedload(FriendRequest.recipient)
        ).order_by(FriendRequest.created_at.desc(), FriendRequest.id).all()

    @staticmethod
    def get_recently_accepted_requests(db: Session, user_id: str, window_hours: int = 24) -> List[FriendRequest]:
        """Requests involving the user that were accepted within the last ``window_hours`` hours."""
        since = utcnow() - timedelta(hours=window_hours)
        return db.query(FriendRequest).filter(
            FriendRequest.status == ACCEPTED,
            or_(FriendRequest.sender_id == user_id, FriendRequest.recipient_id == user_id),
            FriendRequest.updated_at >= since
        ).options(
            joinedload(FriendRequest.sender),
            joinedload(FriendRequest.recipient)
        ).order_by(FriendRequest.updated_at.desc(), FriendRequest.id).all()

    @staticmethod
    def get_friend_request(db: Session, request_id: str) -> Optional[FriendRequest]:
        return db.query(FriendRequest).filter(FriendRequest.id == request_id).first()

    @staticmethod
    def _get_for_recipient(db: Session, request_id: str, acting_user_id: str) -> FriendRequest:
        friend_request = FriendRequestLedger.get_friend_request(db, request_id)
        if not friend_request:
            raise NotFoundError("Friend request not found")

        if friend_request.recipient_id != acting_user_id:
            raise ForbiddenError("You are not authorized to respond to this request")

        return friend_request

    @staticmethod
    def _ensure_transition(friend_request: FriendRequest, target: str):
        if not can_transition(friend_request.status, target):
            raise ConflictError(f"Cannot mark a {friend_request.status} friend request as {target}")

    @staticmethod
    def _compare_and_set(db: Session, friend_request: FriendRequest, expected: str, target: str, **fields):
        """
        Move ``friend_request`` from ``expected`` to ``target`` with a conditional
        UPDATE. Raises ``ConflictError`` when another caller changed the status
        first.
        """
        values = dict(fields, status=target, updated_at=utcnow())
        updated = db.query(FriendRequest).filter(
            FriendRequest.id == friend_request.id,
            FriendRequest.status == expected
        ).update(values, synchronize_session=False)

        if updated != 1:
            db.rollback()
            current = FriendRequestLedger.get_friend_request(db, friend_request.id)
            current_status = current.status if current else "missing"
            logger.warning(
                f"Friend request {friend_request.id} changed concurrently: "
                f"expected {expected}, found {current_status}"
            )
            raise ConflictError(f"Friend request is already {current_status}")
