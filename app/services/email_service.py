import logging
import smtplib
import ssl
from email.message import EmailMessage
import html
from typing import Optional

from fastapi import BackgroundTasks

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    @staticmethod
    def _from_header() -> Optional[str]:
        if settings.smtp_from:
            return settings.smtp_from
        if settings.smtp_username and "@" in settings.smtp_username:
            return settings.smtp_username
        return None

    @staticmethod
    def _render_html_template(*, title: str, message: str, cta_text: str, cta_link: str) -> str:
        title_esc = html.escape(title)
        message_esc = html.escape(message)
        cta_text_esc = html.escape(cta_text)
        cta_link_esc = html.escape(cta_link, quote=True)

        return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{title_esc}</title>
  </head>
  <body style="margin:0; padding:24px; font-family:Arial, Helvetica, sans-serif;">
    <h2 style="margin:0 0 12px 0;">{title_esc}</h2>
    <p style="margin:0 0 18px 0;">{message_esc}</p>
    <p style="margin:0 0 18px 0;">
      <a href="{cta_link_esc}" style="padding:10px 16px; background:#1f6feb; color:#ffffff; text-decoration:none; border-radius:6px;">{cta_text_esc}</a>
    </p>
    <p style="font-size:12px; color:#666666;">
      If the button does not work, copy this link into your browser:<br />
      <a href="{cta_link_esc}">{cta_link_esc}</a>
    </p>
  </body>
</html>"""

    @staticmethod
    def send_email(
        *,
        to_email: str,
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
    ) -> bool:
        """Enviar un email. Nunca lanza: las fallas quedan en el log y retorna False."""
        if settings.email_backend == "disabled":
            return False
        if settings.email_backend == "console":
            logger.info("Email para %s | %s\n%s", to_email, subject, text_body)
            return True
        if settings.email_backend != "smtp":
            logger.error("Backend de email desconocido: %s", settings.email_backend)
            return False
        from_header = EmailService._from_header()
        if not settings.smtp_host or not from_header:
            logger.error("SMTP mal configurado (host/from). Email no enviado a %s", to_email)
            return False

        msg = EmailMessage()
        msg["From"] = from_header
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(text_body)
        if html_body:
            msg.add_alternative(html_body, subtype="html")

        try:
            if settings.smtp_use_ssl:
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context, timeout=10) as server:
                    if settings.smtp_username and settings.smtp_password:
                        server.login(settings.smtp_username, settings.smtp_password)
                    server.send_message(msg)
                    return True

            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
                server.ehlo()
                if settings.smtp_use_tls:
                    server.starttls(context=ssl.create_default_context())
                    server.ehlo()
                if settings.smtp_username and settings.smtp_password:
                    server.login(settings.smtp_username, settings.smtp_password)
                server.send_message(msg)
                return True
        except Exception:
            logger.exception("No se pudo enviar email a %s", to_email)
            return False

    @staticmethod
    def send_email_verification(*, to_email: str, verification_link: str) -> bool:
        subject = settings.verification_email_subject
        text_body = verification_link
        html_body = EmailService._render_html_template(
            title="Verify your email",
            message="Your account was created. Verify your email address to log in.",
            cta_text="Verify email",
            cta_link=verification_link,
        )
        return EmailService.send_email(
            to_email=to_email,
            subject=subject,
            text_body=text_body,
            html_body=html_body,
        )


class BackgroundNotifier:
    """Agenda el email de verificación para después de enviar la respuesta"""

    def __init__(self, background_tasks: BackgroundTasks):
        self.background_tasks = background_tasks

    def send_email_verification(self, *, to_email: str, verification_link: str) -> None:
        self.background_tasks.add_task(
            EmailService.send_email_verification,
            to_email=to_email,
            verification_link=verification_link,
        )
