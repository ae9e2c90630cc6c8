"""Send transactional notification emails through SendGrid."""

from __future__ import annotations

import json
import logging
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from studity.config import get_settings

logger = logging.getLogger(__name__)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages = [
                f"{item['message']} (field: {item['field']})"
                if item.get("field")
                else str(item["message"])
                for item in errors
                if isinstance(item, dict) and item.get("message")
            ]
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _log_sendgrid_failure(status_code: Any, body: Any, recipient: str) -> None:
    details = _extract_sendgrid_error_details(body)
    if status_code and details:
        logger.error(
            "SendGrid rejected email to %s with status %s: %s",
            recipient,
            status_code,
            details,
        )
    elif status_code:
        logger.error("SendGrid rejected email to %s with status %s", recipient, status_code)
    elif details:
        logger.error("SendGrid rejected email to %s: %s", recipient, details)
    else:
        logger.error("SendGrid rejected email to %s", recipient)


def send_email(subject: str, html_content: str, recipient: str) -> bool:
    """Send an email using the configured SendGrid credentials.

    Returns ``True`` only for a 2xx response; every failure is logged and
    reported as ``False``.
    """

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        response = client.send(message)
    except Exception as exc:
        status_code = getattr(exc, "status_code", None)
        body = getattr(exc, "body", None)
        if status_code is None and body is None:
            logger.exception("Error sending email to %s via SendGrid", recipient)
        else:
            _log_sendgrid_failure(status_code, body, recipient)
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_sendgrid_failure(status_code, getattr(response, "body", None), recipient)
        return False

    return True


__all__ = ["send_email"]
