import html
from sqlalchemy.orm import Session
from app import crud
from app.exceptions import InvalidOperationError, NotFoundError, ForbiddenError
from app.models import User
from app.utils.email_sender import EmailSender
from app.utils.logger import get_logger

logger = get_logger(__name__)

def build_nudge_email(sender_name: str, recipient_name: str) -> tuple[str, str]:
    """Subject and HTML body of an emergency nudge."""
    sender_name = html.escape(sender_name or "A friend")
    recipient_name = html.escape(recipient_name or "there")
    subject = f"Urgent: {sender_name} is trying to reach you!"
    body = (
        f"<p>Hello {recipient_name},</p>"
        "<p>This is an urgent notification from Streamify.</p>"
        f"<p>Your friend, <b>{sender_name}</b>, is trying to contact you urgently through the app "
        "but hasn't received a response.</p>"
        "<p>Please check your messages on Streamify or contact them back as soon as possible.</p>"
        "<p>Thank you,<br/>The Streamify Team</p>"
    )
    return subject, body

def send_nudge(db: Session, sender: User, recipient_id: str, email_sender: EmailSender) -> User:
    """
    Email ``recipient_id`` that ``sender`` urgently wants to reach them.
    Only friends can nudge each other.

    Returns:
        The nudged user
    """
    if sender.id == recipient_id:
        raise InvalidOperationError("You can't nudge yourself")

    recipient = crud.get_user(db, recipient_id)
    if not recipient:
        raise NotFoundError("Recipient not found")

    if not crud.are_friends(db, sender.id, recipient.id):
        raise ForbiddenError("You can only nudge your friends")

    if not recipient.email:
        raise NotFoundError("Recipient has no email address")

    subject, body = build_nudge_email(sender.full_name, recipient.full_name)
    email_sender.send_email(recipient.email, subject, body)
    logger.info(f"Emergency nudge sent from {sender.id} to {recipient.id}")
    return recipient
