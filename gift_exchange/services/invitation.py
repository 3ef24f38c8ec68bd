from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from urllib.parse import urlencode

from loguru import logger


@dataclass(frozen=True)
class InvitationEmail:
    recipient_email: str
    exchange_name: str
    organizer_name: str
    exchange_code: str


def build_signup_link(base_url: str, exchange_code: str) -> str:
    return f"{base_url.rstrip('/')}/signup?{urlencode({'code': exchange_code})}"


def log_invitation_email(invitation: InvitationEmail, base_url: str) -> None:
    """Emails are not sent yet; the invitation is written to the log instead."""
    signup_link = build_signup_link(base_url, invitation.exchange_code)
    logger.bind(
        recipient=invitation.recipient_email,
        exchange_code=invitation.exchange_code,
    ).info(
        "Invitation email\n"
        "To: {recipient}\n"
        "Subject: You're invited to {exchange}!\n"
        "From: {organizer}\n"
        "Join link: {link}\n"
        "Message: {organizer} has invited you to participate in \"{exchange}\".",
        recipient=invitation.recipient_email,
        exchange=invitation.exchange_name,
        organizer=invitation.organizer_name,
        link=signup_link,
    )


def log_invitation_emails(
    invitee_emails: Iterable,
    exchange_name: str,
    organizer_name: str,
    exchange_code: str,
    base_url: str,
) -> int:
    sent = 0
    for email in invitee_emails:
        if not isinstance(email, str) or not email.strip():
            continue
        log_invitation_email(
            InvitationEmail(
                recipient_email=email.strip(),
                exchange_name=exchange_name,
                organizer_name=organizer_name,
                exchange_code=exchange_code,
            ),
            base_url,
        )
        sent += 1
    return sent
