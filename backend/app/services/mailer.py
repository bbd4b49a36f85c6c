"""
Notification emails

Builds the transactional emails the system sends and hands them to the
notification gateway. Each send_* helper raises UpstreamError on delivery
failure; callers decide whether that failure matters.
"""
import datetime as dt
from html import escape

from app.models.user import Role
from ..config import settings
from .notifier import EmailMessage, get_notifier

SIGNATURE = "Best regards,\nOKRFlow Team"


def format_day(day: dt.date) -> str:
    """Render a date like "Mon Jun 03 2024"."""
    return day.strftime("%a %b %d %Y")


def week_range(week_start: dt.date, week_end: dt.date) -> str:
    return f"{format_day(week_start)} to {format_day(week_end)}"


def invite_link(token: str) -> str:
    return f"{settings.frontend_url}/setup-password?token={token}"


def goal_link(recipient, owner_id: str) -> str:
    """ICs read their own goals page; managers and admins open the IC detail page."""
    if recipient.role == Role.IC:
        return f"{settings.frontend_url}/ic/goals"
    return f"{settings.frontend_url}/manager/ic/{owner_id}"


def _html(greeting: str, paragraphs: list[str], link: str, link_label: str) -> str:
    body = "".join(f"<p>{escape(p)}</p>" for p in paragraphs)
    return (
        "<html><body>"
        f"<p>{escape(greeting)}</p>"
        f"{body}"
        f'<p><a href="{escape(link, quote=True)}">{escape(link_label)}</a></p>'
        "<p>Best regards,<br>OKRFlow Team</p>"
        "</body></html>"
    )


def build_invite_email(email: str, role: str, token: str) -> EmailMessage:
    link = invite_link(token)
    days = settings.invite_expire_days
    return EmailMessage(
        to=email,
        subject="You've been invited to OKRFlow",
        html_body=_html(
            "Hello,",
            [f"You've been invited to join OKRFlow as a {role}.",
             f"This link will expire in {days} days."],
            link,
            "Set up your account",
        ),
        text_body=(
            f"You've been invited to join OKRFlow as a {role}.\n\n"
            f"Click the link below to set up your account:\n{link}\n\n"
            f"This link will expire in {days} days.\n\n"
            "If you did not expect this invitation, please ignore this email."
        ),
        tag="invite",
    )


def build_submitted_email(
    manager_email: str,
    manager_name: str,
    ic_name: str,
    ic_id: str,
    week_start: dt.date,
    week_end: dt.date,
    kind: str,
) -> EmailMessage:
    """kind is "goals" or "results"."""
    link = f"{settings.frontend_url}/manager/ic/{ic_id}"
    line = f"{ic_name} has submitted their {kind} for the week of {week_range(week_start, week_end)}."
    return EmailMessage(
        to=manager_email,
        subject=f"{ic_name} has submitted their weekly {kind}",
        html_body=_html(f"Hi {manager_name},", [line], link, f"View their {kind}"),
        text_body=f"Hi {manager_name},\n\n{line}\n\nView their {kind}: {link}\n\n{SIGNATURE}",
        tag=f"{kind}-submitted",
    )


def build_comment_email(
    recipient_email: str,
    recipient_name: str,
    commenter_name: str,
    comment_text: str,
    week_start: dt.date,
    week_end: dt.date,
    view_link: str,
) -> EmailMessage:
    line = f"{commenter_name} commented on the goals for the week of {week_range(week_start, week_end)}."
    return EmailMessage(
        to=recipient_email,
        subject=f"{commenter_name} commented on your goals",
        html_body=_html(f"Hi {recipient_name},", [line, f'Comment: "{comment_text}"'],
                        view_link, "View and respond"),
        text_body=(
            f"Hi {recipient_name},\n\n{line}\n\nComment: \"{comment_text}\"\n\n"
            f"View and respond: {view_link}\n\n{SIGNATURE}"
        ),
        tag="comment",
    )


def build_reply_email(
    recipient_email: str,
    recipient_name: str,
    replier_name: str,
    reply_text: str,
    original_comment: str,
    week_start: dt.date,
    week_end: dt.date,
    view_link: str,
) -> EmailMessage:
    line = f"{replier_name} replied to your comment for the week of {week_range(week_start, week_end)}."
    return EmailMessage(
        to=recipient_email,
        subject=f"{replier_name} replied to your comment",
        html_body=_html(
            f"Hi {recipient_name},",
            [line, f'Your comment: "{original_comment}"', f'Reply: "{reply_text}"'],
            view_link,
            "View and respond",
        ),
        text_body=(
            f"Hi {recipient_name},\n\n{line}\n\nYour comment: \"{original_comment}\"\n"
            f"Reply: \"{reply_text}\"\n\nView and respond: {view_link}\n\n{SIGNATURE}"
        ),
        tag="reply",
    )


async def send_invite_email(email: str, role: str, token: str) -> None:
    await get_notifier().send(build_invite_email(email, role, token))


async def send_submitted_email(manager, ic, goal, kind: str) -> None:
    await get_notifier().send(build_submitted_email(
        manager.email, manager.name or "Manager", ic.display_name, str(ic.id),
        goal.week_start, goal.week_end, kind,
    ))


async def send_comment_email(recipient, commenter_name: str, comment_text: str, goal) -> None:
    await get_notifier().send(build_comment_email(
        recipient.email, recipient.name or "User", commenter_name, comment_text,
        goal.week_start, goal.week_end, goal_link(recipient, str(goal.user_id)),
    ))


async def send_reply_email(recipient, replier_name: str, reply_text: str, original_comment: str, goal) -> None:
    await get_notifier().send(build_reply_email(
        recipient.email, recipient.name or "User", replier_name, reply_text, original_comment,
        goal.week_start, goal.week_end, goal_link(recipient, str(goal.user_id)),
    ))
