"""Creator program transactional email templates.

Each renderer returns subject, HTML and plain-text bodies. Every value that
comes from a user or admin is HTML-escaped before it reaches the markup.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from html import escape

from creator_program.core.config import settings
from creator_program.core.constants import FOLLOWER_THRESHOLD, GRACE_PERIOD_DAYS
from creator_program.services.follower_service import format_follower_count


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


_LAYOUT = """
<div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background-color: #f4f4f5; margin: 0; padding: 20px;">
  <div style="max-width: 560px; margin: 0 auto; background: white;
              border-radius: 12px; padding: 40px;">
    <h1 style="font-size: 24px; font-weight: 600; color: #18181b; margin: 0 0 24px 0;">
      {heading}
    </h1>
    {body}
    <div style="margin-top: 32px; padding-top: 24px; border-top: 1px solid #e4e4e7;
                color: #a1a1aa; font-size: 13px;">
      {program_name}
    </div>
  </div>
</div>
""".strip()

_PARAGRAPH = (
    '<p style="font-size: 16px; color: #3f3f46; line-height: 1.6; margin: 0 0 16px 0;">'
    "{}</p>"
)

_BUTTON = (
    '<a href="{href}" target="_blank" style="display: inline-block; background-color: #18181b; '
    "color: white; text-decoration: none; font-weight: 500; font-size: 15px; "
    'padding: 12px 24px; border-radius: 8px;">{label}</a>'
)


def _program_name() -> str:
    return settings.PROGRAM_NAME


def _frontend_url(path: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}{path}"


def _format_date(value: datetime | None) -> str:
    if value is None:
        return ""
    return value.strftime("%B %d, %Y")


def _render(heading: str, paragraphs: list[str], button: tuple[str, str] | None = None) -> str:
    """Paragraphs are pre-escaped HTML fragments."""
    body = "\n    ".join(_PARAGRAPH.format(p) for p in paragraphs)
    if button:
        label, href = button
        body += "\n    " + _BUTTON.format(href=escape(href, quote=True), label=escape(label))
    return _LAYOUT.format(
        heading=escape(heading),
        body=body,
        program_name=escape(_program_name()),
    )


def _text(*lines: str) -> str:
    return "\n\n".join(line for line in lines if line) + f"\n\n{_program_name()}\n"


def application_received(display_name: str) -> RenderedEmail:
    name = escape(display_name)
    html = _render(
        "We received your application",
        [
            f"Hi {name},",
            f"Thanks for applying to the {escape(_program_name())}. Our team reviews every "
            "application and you will hear from us by email once a decision has been made.",
            "You can check the status of your application at any time from your account.",
        ],
        ("View application", _frontend_url("/creators/apply")),
    )
    text = _text(
        f"Hi {display_name},",
        f"Thanks for applying to the {_program_name()}. Our team reviews every application "
        "and you will hear from us by email once a decision has been made.",
    )
    return RenderedEmail(f"Application Received - {_program_name()}", html, text)


def admin_new_application(
    *,
    admin_name: str,
    applicant_name: str,
    applicant_username: str | None,
    primary_platform: str,
    platforms: list[dict],
    application_id: str,
) -> RenderedEmail:
    platform_lines = [
        f"{p.get('type', 'other')}: {format_follower_count(int(p.get('follower_count') or 0))}"
        for p in platforms
    ]
    who = applicant_name if not applicant_username else f"{applicant_name} (@{applicant_username})"
    review_url = _frontend_url(f"/admin/creator-applications/{application_id}")
    html = _render(
        "New creator application",
        [
            f"Hi {escape(admin_name)},",
            f"<strong>{escape(who)}</strong> applied to the creator program with "
            f"<strong>{escape(primary_platform)}</strong> as their primary platform.",
            "<br>".join(escape(line) for line in platform_lines),
            "This application needs approval from two different admins.",
        ],
        ("Review application", review_url),
    )
    text = _text(
        f"Hi {admin_name},",
        f"{who} applied to the creator program with {primary_platform} as their primary platform.",
        "\n".join(platform_lines),
        f"Review: {review_url}",
    )
    return RenderedEmail("New Creator Application Submitted", html, text)


def application_approved(*, display_name: str, slug: str, plan_applied: bool) -> RenderedEmail:
    profile_url = _frontend_url(f"/creators/{slug}")
    plan_line = (
        "Your account has been upgraded to the Base Plan at no cost while you remain in the program."
        if plan_applied
        else "Your existing subscription stays as it is; the program Base Plan is recorded on your account."
    )
    html = _render(
        "Welcome to the Creator Program!",
        [
            f"Hi {escape(display_name)},",
            "Your application has been approved and your public creator profile is live.",
            escape(plan_line),
            "You can also apply a free Base Plan promotion to one community you own.",
        ],
        ("View your profile", profile_url),
    )
    text = _text(
        f"Hi {display_name},",
        "Your application has been approved and your public creator profile is live.",
        plan_line,
        f"Profile: {profile_url}",
    )
    return RenderedEmail("Welcome to the Creator Program!", html, text)


def application_rejected(
    *, display_name: str, reason: str, feedback: str | None
) -> RenderedEmail:
    paragraphs = [
        f"Hi {escape(display_name)},",
        "Thank you for your interest. After review we are unable to accept your application "
        "at this time.",
        f"<strong>Reason:</strong> {escape(reason)}",
    ]
    if feedback:
        paragraphs.append(f"<strong>Feedback:</strong> {escape(feedback)}")
    paragraphs.append("You are welcome to apply again in the future.")
    html = _render("Application update", paragraphs)
    text = _text(
        f"Hi {display_name},",
        "Thank you for your interest. After review we are unable to accept your application "
        "at this time.",
        f"Reason: {reason}",
        f"Feedback: {feedback}" if feedback else "",
    )
    return RenderedEmail(f"Application Update - {_program_name()}", html, text)


def creator_removed(*, display_name: str, reason: str) -> RenderedEmail:
    html = _render(
        "Creator program removal",
        [
            f"Hi {escape(display_name)},",
            "Your creator account has been removed from the program and the plan benefits "
            "attached to it have ended.",
            f"<strong>Reason:</strong> {escape(reason)}",
            "If you believe this is a mistake, reply to this email.",
        ],
    )
    text = _text(
        f"Hi {display_name},",
        "Your creator account has been removed from the program and the plan benefits "
        "attached to it have ended.",
        f"Reason: {reason}",
    )
    return RenderedEmail("Creator Program Removal Notice", html, text)


def low_follower_warning(
    *, display_name: str, max_followers: int, ends_at: datetime
) -> RenderedEmail:
    deadline = _format_date(ends_at)
    html = _render(
        "Follower count below minimum",
        [
            f"Hi {escape(display_name)},",
            f"Your highest follower count is {max_followers:,}, below our minimum of "
            f"{FOLLOWER_THRESHOLD:,}.",
            f"You have {GRACE_PERIOD_DAYS} days, until <strong>{escape(deadline)}</strong>, "
            "to get back above the minimum. Sync your followers once you do.",
        ],
        ("Sync followers", _frontend_url("/creators/me")),
    )
    text = _text(
        f"Hi {display_name},",
        f"Your highest follower count is {max_followers:,}, below our minimum of "
        f"{FOLLOWER_THRESHOLD:,}.",
        f"You have {GRACE_PERIOD_DAYS} days, until {deadline}, to get back above the minimum.",
    )
    return RenderedEmail("Action Required: Follower Count Below Minimum", html, text)


def grace_period_reminder(
    *, display_name: str, max_followers: int, ends_at: datetime
) -> RenderedEmail:
    deadline = _format_date(ends_at)
    html = _render(
        "Your grace period ends tomorrow",
        [
            f"Hi {escape(display_name)},",
            f"Your highest follower count is still {max_followers:,}. Unless it reaches "
            f"{FOLLOWER_THRESHOLD:,} by <strong>{escape(deadline)}</strong>, your creator "
            "account will be removed.",
        ],
        ("Sync followers", _frontend_url("/creators/me")),
    )
    text = _text(
        f"Hi {display_name},",
        f"Your highest follower count is still {max_followers:,}. Unless it reaches "
        f"{FOLLOWER_THRESHOLD:,} by {deadline}, your creator account will be removed.",
    )
    return RenderedEmail("Final Reminder: Creator Account Removal Tomorrow", html, text)


def grace_period_recovered(*, display_name: str, max_followers: int) -> RenderedEmail:
    html = _render(
        "You're back in good standing",
        [
            f"Hi {escape(display_name)},",
            f"Your highest follower count is now {max_followers:,}. Your grace period has been "
            "cleared and your creator account is in good standing.",
        ],
    )
    text = _text(
        f"Hi {display_name},",
        f"Your highest follower count is now {max_followers:,}. Your grace period has been "
        "cleared and your creator account is in good standing.",
    )
    return RenderedEmail("Great News: Your Account is Back in Good Standing!", html, text)
