"""Transactional email via the Mailgun HTTP API.

Without ``MAILGUN_API_KEY`` and ``MAILGUN_DOMAIN`` nothing is sent: the
message is logged instead, which is what local development and tests use.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path

import jinja2
import requests

logger = logging.getLogger(__name__)

EMAIL_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates" / "email"
DEFAULT_API_BASE = "https://api.mailgun.net/v3"
DEFAULT_FROM = "InterviewAce <noreply@interviewace.com>"
DEFAULT_FRONTEND_URL = "http://localhost:5173"
REQUEST_TIMEOUT = 30

TEMPLATES = {"welcome", "report_ready", "premium_welcome"}


def mailgun_configured() -> bool:
    return bool(os.environ.get("MAILGUN_API_KEY") and os.environ.get("MAILGUN_DOMAIN"))


@lru_cache(maxsize=1)
def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(EMAIL_TEMPLATE_DIR)),
        autoescape=jinja2.select_autoescape(["html"]),
    )


def render_email(template: str, data: dict | None = None) -> str:
    """Render ``templates/email/<template>.html``; dashes in the name are accepted."""
    name = template.replace("-", "_")
    if name not in TEMPLATES:
        raise ValueError(f"Unknown email template: {template}")
    context = dict(data or {})
    context.setdefault("frontend_url", os.environ.get("FRONTEND_URL") or DEFAULT_FRONTEND_URL)
    return _environment().get_template(f"{name}.html").render(**context)


def send_email(to: str, subject: str, template: str, data: dict | None = None,
               attachments: list | None = None) -> str | None:
    """Send one email. Returns the Mailgun message id, or None when only logged.

    Args:
        to: recipient address.
        subject: subject line.
        template: ``welcome``, ``report_ready`` or ``premium_welcome``.
        data: template variables.
        attachments: list of ``(filename, bytes)`` tuples.

    Raises:
        requests.RequestException: Mailgun rejected the message or was unreachable.
    """
    if not to:
        raise ValueError("Recipient address is required")
    html = render_email(template, data)
    attachments = attachments or []

    if not mailgun_configured():
        logger.info(
            "Email would be sent (Mailgun not configured): to=%s subject=%r template=%s attachments=%d",
            to, subject, template, len(attachments),
        )
        return None

    domain = os.environ["MAILGUN_DOMAIN"]
    api_base = os.environ.get("MAILGUN_API_BASE") or DEFAULT_API_BASE
    files = [("attachment", (filename, content)) for filename, content in attachments]
    response = requests.post(
        f"{api_base}/{domain}/messages",
        auth=("api", os.environ["MAILGUN_API_KEY"]),
        data={
            "from": os.environ.get("MAILGUN_FROM_EMAIL") or DEFAULT_FROM,
            "to": to,
            "subject": subject,
            "html": html,
        },
        files=files or None,
        timeout=REQUEST_TIMEOUT,
    )
    if not response.ok:
        logger.error("Mailgun rejected email to %s: %s %s", to, response.status_code, response.text[:300])
    response.raise_for_status()
    message_id = (response.json() or {}).get("id")
    logger.info("Email sent to %s (id=%s)", to, message_id)
    return message_id
