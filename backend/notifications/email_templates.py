"""
Email content for notification emails and the weekly LIRF digest.

Data is prepared once into plain dicts; the _build_* formatters only handle
presentation. User-supplied text (titles, messages, run names) is HTML-escaped.
"""

from datetime import date
from html import escape

from config.notification_settings import CLUB_NAME, DIGEST_LOOKAHEAD_DAYS, FRONTEND_BASE_URL
from models.member import EmailRecipient
from models.notification import Notification
from models.run import RunDetails, RunRequiringLirf
from notifications.unsubscribe_tokens import build_unsubscribe_url

PRIORITY_EMOJI = {"low": "📝", "normal": "📢", "high": "⚠️", "urgent": "🚨"}
TYPE_EMOJI = {"run_specific": "🏃", "general": "📢", "urgent": "🚨"}
PRIORITY_COLOURS = {
    "urgent": ("#fef2f2", "#dc2626"),
    "high": ("#fef3c7", "#f59e0b"),
}
DEFAULT_PRIORITY_COLOURS = ("#f3f4f6", "#6b7280")


def _format_long_date(run_date: str) -> str:
    """'2026-10-23' -> 'Friday, 23 October 2026' (falls back to the raw value)."""
    try:
        d = date.fromisoformat(run_date[:10])
    except (TypeError, ValueError):
        return run_date or "Unknown date"
    return f"{d:%A}, {d.day} {d:%B %Y}"


def _format_short_date(run_date: str) -> str:
    """'2026-10-23' -> 'Fri 23 Oct'."""
    try:
        d = date.fromisoformat(run_date[:10])
    except (TypeError, ValueError):
        return run_date or "Unknown date"
    return f"{d:%a} {d.day} {d:%b}"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


# ---------------------------------------------------------------------------
# Notification emails
# ---------------------------------------------------------------------------


def build_notification_subject(notification: Notification) -> str:
    prefix = "[URGENT] " if notification.type == "urgent" else ""
    return f"{prefix}[{CLUB_NAME}] {notification.title}"


def render_notification_email(
    recipient: EmailRecipient,
    notification: Notification,
    run_details: RunDetails | None = None,
) -> dict[str, str]:
    """
    Render subject, HTML and text for one recipient.

    Run details are only embedded for run_specific notifications. The
    returned unsubscribe_url is also used for the List-Unsubscribe header.
    """
    if notification.type != "run_specific":
        run_details = None

    unsubscribe_url = build_unsubscribe_url(recipient.id)
    return {
        "subject": build_notification_subject(notification),
        "unsubscribe_url": unsubscribe_url,
        "html": _build_notification_html(recipient, notification, run_details, unsubscribe_url),
        "text": _build_notification_text(recipient, notification, run_details, unsubscribe_url),
    }


def _build_notification_html(
    recipient: EmailRecipient,
    notification: Notification,
    run_details: RunDetails | None,
    unsubscribe_url: str,
) -> str:
    badge_bg, badge_fg = PRIORITY_COLOURS.get(notification.priority, DEFAULT_PRIORITY_COLOURS)

    html = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(CLUB_NAME)} Notification</title>
    <style>
        body {{
            font-family: Arial, sans-serif;
            line-height: 1.6;
            color: #333;
            margin: 0;
            padding: 0;
            background-color: #f5f5f5;
        }}
        .container {{
            max-width: 600px;
            margin: 0 auto;
            background: white;
        }}
        .header {{
            background: linear-gradient(135deg, #dc2626, #b91c1c);
            color: white;
            padding: 30px 20px;
            text-align: center;
        }}
        .header h1 {{
            margin: 0;
            font-size: 28px;
        }}
        .content {{
            padding: 30px 20px;
        }}
        .notification-title {{
            font-size: 24px;
            font-weight: bold;
            color: #1f2937;
            margin: 0 0 10px 0;
        }}
        .priority-badge {{
            background: {badge_bg};
            color: {badge_fg};
            padding: 4px 12px;
            border-radius: 12px;
            font-size: 12px;
            font-weight: 500;
            text-transform: uppercase;
        }}
        .message {{
            font-size: 16px;
            color: #4b5563;
            margin: 20px 0;
            white-space: pre-wrap;
        }}
        .run-details {{
            background: #f9fafb;
            border: 1px solid #e5e7eb;
            border-radius: 8px;
            padding: 20px;
            margin: 20px 0;
        }}
        .run-detail-item {{
            margin-bottom: 8px;
            font-size: 14px;
            color: #6b7280;
        }}
        .cta-button {{
            display: inline-block;
            background: #dc2626;
            color: white;
            padding: 15px 30px;
            text-decoration: none;
            border-radius: 8px;
            font-weight: bold;
        }}
        .footer {{
            background: #f9fafb;
            padding: 20px;
            text-align: center;
            border-top: 1px solid #e5e7eb;
            font-size: 14px;
            color: #6b7280;
        }}
        .footer a {{
            color: #dc2626;
            text-decoration: none;
        }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>🏃 {escape(CLUB_NAME)}</h1>
            <p>Notification Update</p>
        </div>
        <div class="content">
            <h2 class="notification-title">{TYPE_EMOJI.get(notification.type, "")} {escape(notification.title)}</h2>
            <span class="priority-badge">{PRIORITY_EMOJI.get(notification.priority, "")} {notification.priority}</span>
            <p>Hi {escape(recipient.full_name or "there")},</p>
            <div class="message">{escape(notification.message)}</div>
"""

    if run_details:
        html += f"""
            <div class="run-details">
                <h3>🏃 Run Details</h3>
                <div class="run-detail-item"><strong>📅 Date:</strong> {_format_long_date(run_details.run_date)}</div>
                <div class="run-detail-item"><strong>🕐 Time:</strong> {escape(run_details.run_time)}</div>
                <div class="run-detail-item"><strong>📍 Meeting Point:</strong> {escape(run_details.meeting_point)}</div>
"""
        if run_details.approximate_distance:
            html += f"""
                <div class="run-detail-item"><strong>📏 Distance:</strong> {escape(run_details.approximate_distance)}</div>
"""
        html += """
            </div>
"""

    html += f"""
            <div style="text-align: center; margin: 30px 0;">
                <a href="{FRONTEND_BASE_URL}" class="cta-button">View in {escape(CLUB_NAME)} App →</a>
            </div>
        </div>
        <div class="footer">
            <p>
                This notification was sent by {escape(CLUB_NAME)}.<br>
                You're receiving this because you're a club member with email notifications enabled.
            </p>
            <p style="font-size: 12px;">
                <a href="{unsubscribe_url}">Unsubscribe from email notifications</a> |
                <a href="{FRONTEND_BASE_URL}">Update preferences</a>
            </p>
        </div>
    </div>
</body>
</html>
"""
    return html


def _build_notification_text(
    recipient: EmailRecipient,
    notification: Notification,
    run_details: RunDetails | None,
    unsubscribe_url: str,
) -> str:
    text = f"""{CLUB_NAME} Notification

Hi {recipient.full_name or "there"},

{notification.title}
Priority: {notification.priority.upper()}

{notification.message}

"""

    if run_details:
        text += "RUN DETAILS:\n"
        text += f"Date: {_format_long_date(run_details.run_date)}\n"
        text += f"Time: {run_details.run_time}\n"
        text += f"Meeting Point: {run_details.meeting_point}\n"
        if run_details.approximate_distance:
            text += f"Distance: {run_details.approximate_distance}\n"
        text += "\n"

    text += f"""View in app: {FRONTEND_BASE_URL}

---
You're receiving this because you're a {CLUB_NAME} member with email notifications enabled.
To unsubscribe: {unsubscribe_url}
"""
    return text


# ---------------------------------------------------------------------------
# Weekly LIRF digest
# ---------------------------------------------------------------------------


def build_digest_subject(runs: list[RunRequiringLirf]) -> str:
    if runs:
        return f"🏃 LIRF Reminder: {_plural(len(runs), 'run')} need assignment"
    return "✅ LIRF Reminder: All runs covered"


def render_digest_email(
    recipient: EmailRecipient, runs: list[RunRequiringLirf], today: date
) -> dict[str, str]:
    """Render the coverage digest for one LIRF/admin recipient."""
    prepared_runs = _prepare_digest_runs(runs)
    formatted_today = f"{today:%A}, {today.day} {today:%B %Y}"
    return {
        "subject": build_digest_subject(runs),
        "html": _build_digest_html(recipient.full_name, prepared_runs, formatted_today),
        "text": _build_digest_text(recipient.full_name, prepared_runs, formatted_today),
    }


def _prepare_digest_runs(runs: list[RunRequiringLirf]) -> list[dict[str, str]]:
    return [
        {
            "title": run.run_title,
            "when": f"{_format_short_date(run.run_date)} at {run.run_time}",
            "meeting_point": run.meeting_point,
            "distance": run.approximate_distance or "",
            "vacancies": f"{run.lirf_vacancies} of {run.lirfs_required} needed",
            "url": f"{FRONTEND_BASE_URL}/runs/{run.id}",
        }
        for run in runs
    ]


def _build_digest_html(
    recipient_name: str, prepared_runs: list[dict[str, str]], formatted_today: str
) -> str:
    html = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>LIRF Assignment Reminder</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #374151; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: linear-gradient(135deg, #dc2626 0%, #991b1b 100%); color: white; padding: 30px; border-radius: 8px 8px 0 0; text-align: center;">
        <h1 style="margin: 0; font-size: 24px;">🏃 {escape(CLUB_NAME)}</h1>
        <p style="margin: 8px 0 0 0; font-size: 14px;">Weekly LIRF Assignment Reminder</p>
    </div>
    <div style="background: white; padding: 30px; border: 1px solid #e5e7eb; border-top: none;">
        <p>Hi <strong>{escape(recipient_name or "there")}</strong>,</p>
        <p style="color: #6b7280;">This is your weekly reminder for runs requiring LIRF assignment in the next {DIGEST_LOOKAHEAD_DAYS} days.</p>
"""

    if prepared_runs:
        html += f"""
        <div style="background: #fef2f2; border: 1px solid #fecaca; padding: 16px; border-radius: 6px; margin-bottom: 24px;">
            <div style="font-weight: 600; color: #dc2626;">⚠️ {_plural(len(prepared_runs), 'run')} requiring LIRF assignment</div>
            <div style="color: #991b1b; font-size: 13px;">Please review and assign LIRFs as soon as possible</div>
        </div>
"""
        for run in prepared_runs:
            html += f"""
        <div style="background: #f9fafb; border-left: 4px solid #dc2626; padding: 16px; margin-bottom: 12px;">
            <div style="font-weight: 600; color: #111827;">{escape(run['title'])}</div>
            <div style="color: #6b7280; font-size: 14px;">
                <div><strong>Date:</strong> {escape(run['when'])}</div>
                <div><strong>Meeting Point:</strong> {escape(run['meeting_point'])}</div>
"""
            if run["distance"]:
                html += f"""
                <div><strong>Distance:</strong> {escape(run['distance'])}</div>
"""
            html += f"""
                <div style="color: #dc2626; font-weight: 600; margin-top: 8px;">⚠️ LIRF Vacancies: {run['vacancies']}</div>
                <a href="{run['url']}" style="color: #dc2626;">View &amp; Assign LIRFs →</a>
            </div>
        </div>
"""
    else:
        html += f"""
        <div style="background: #f0fdf4; border: 1px solid #bbf7d0; padding: 16px; border-radius: 6px; margin-bottom: 24px;">
            <div style="font-weight: 600; color: #166534;">✅ All runs in the next {DIGEST_LOOKAHEAD_DAYS} days have LIRFs assigned</div>
            <div style="color: #15803d; font-size: 13px;">Great work! No action required this week.</div>
        </div>
"""

    html += f"""
        <div style="text-align: center; margin-top: 30px;">
            <a href="{FRONTEND_BASE_URL}/admin/runs" style="display: inline-block; background: #dc2626; color: white; padding: 12px 24px; border-radius: 6px; text-decoration: none;">Manage Run Assignments</a>
        </div>
    </div>
    <div style="margin-top: 20px; padding: 20px; background: #f9fafb; font-size: 12px; color: #6b7280; text-align: center;">
        <p>This is an automated weekly reminder.</p>
        <p><strong>{escape(CLUB_NAME)}</strong> | {formatted_today}</p>
    </div>
</body>
</html>
"""
    return html


def _build_digest_text(
    recipient_name: str, prepared_runs: list[dict[str, str]], formatted_today: str
) -> str:
    text = f"""{CLUB_NAME.upper()} - WEEKLY LIRF ASSIGNMENT REMINDER
{formatted_today}

Hi {recipient_name or "there"},

This is your weekly reminder for runs requiring LIRF assignment in the next {DIGEST_LOOKAHEAD_DAYS} days.

"""

    if prepared_runs:
        count = len(prepared_runs)
        text += f"⚠️ {count} RUN{'S' if count != 1 else ''} REQUIRING LIRF ASSIGNMENT:\n\n"
        for i, run in enumerate(prepared_runs, 1):
            text += f"{i}. {run['title']}\n"
            text += f"   Date: {run['when']}\n"
            text += f"   Meeting Point: {run['meeting_point']}\n"
            if run["distance"]:
                text += f"   Distance: {run['distance']}\n"
            text += f"   ⚠️ LIRF Vacancies: {run['vacancies']}\n\n"

        text += f"Please log in to assign LIRFs as soon as possible:\n{FRONTEND_BASE_URL}/admin/runs\n\n"
    else:
        text += f"✅ ALL RUNS IN THE NEXT {DIGEST_LOOKAHEAD_DAYS} DAYS HAVE LIRFS ASSIGNED\n\n"
        text += "Great work! No action required this week.\n\n"

    text += f"""---
This is an automated weekly reminder.
{CLUB_NAME} Booking System
"""
    return text
