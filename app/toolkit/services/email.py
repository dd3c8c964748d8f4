"""
Email service for centralized email sending.

This module provides the EmailService class for sending emails with
Django template rendering for HTML and plain text bodies.

Configuration:
    Email settings are read from Django settings:
    - EMAIL_BACKEND
    - EMAIL_HOST, EMAIL_PORT
    - DEFAULT_FROM_EMAIL

Templates:
    Templates live in each app's templates/ directory. A template name
    resolves to ``{template_name}.html`` and ``{template_name}.txt``; the
    text part falls back to the HTML with tags stripped.

Usage:
    from toolkit.services.email import EmailService

    EmailService.send(
        to="player@example.com",
        subject="Order Confirmed - #1A2B3C4D",
        template_name="notifications/email/order_receipt",
        context={"order": order, "items": items},
    )
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template import TemplateDoesNotExist
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)


class EmailService:
    """
    Centralized email sending with template support.

    Features:
        - Template-based emails (HTML + plain text)
        - Raw content emails

    Both entry points return ``True`` when the backend accepted the message
    and ``False`` when sending failed; failures are logged, never raised.
    """

    @staticmethod
    def send(
        to: str | list[str],
        subject: str,
        template_name: str,
        context: dict,
        from_email: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        """
        Send email using a template.

        Args:
            to: Recipient email address(es)
            subject: Email subject line
            template_name: Name of template (without extension)
            context: Template context variables
            from_email: Sender email (defaults to DEFAULT_FROM_EMAIL)
            reply_to: Reply-to address

        Returns:
            True if email was sent successfully
        """
        html_content = render_to_string(f"{template_name}.html", context)

        try:
            text_content = render_to_string(f"{template_name}.txt", context)
        except TemplateDoesNotExist:
            text_content = strip_tags(html_content)

        return EmailService.send_raw(
            to=to,
            subject=subject,
            body_text=text_content,
            body_html=html_content,
            from_email=from_email,
            reply_to=reply_to,
        )

    @staticmethod
    def send_raw(
        to: str | list[str],
        subject: str,
        body_text: str,
        body_html: str | None = None,
        from_email: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        """
        Send email with raw content (no template).

        Args:
            to: Recipient email address(es)
            subject: Email subject line
            body_text: Plain text email body
            body_html: HTML email body (optional)
            from_email: Sender email (defaults to DEFAULT_FROM_EMAIL)
            reply_to: Reply-to address

        Returns:
            True if email was sent successfully
        """
        if isinstance(to, str):
            to = [to]

        email = EmailMultiAlternatives(
            subject=subject,
            body=body_text,
            from_email=from_email or settings.DEFAULT_FROM_EMAIL,
            to=to,
            reply_to=[reply_to] if reply_to else None,
        )

        if body_html:
            email.attach_alternative(body_html, "text/html")

        try:
            email.send(fail_silently=False)
        except Exception:
            # SMTP, socket and provider-specific backend errors all land here
            logger.exception(
                "Failed to send email",
                extra={"recipients": to, "subject": subject},
            )
            return False

        logger.info("Email sent", extra={"recipients": to, "subject": subject})
        return True
