import logging
import smtplib

import pytest
from fastapi import BackgroundTasks

from app.core.config import settings
from app.services import email_service
from app.services.email_service import BackgroundNotifier, EmailService

LINK = "http://localhost:8000/api/users/verify/abc/0123456789abcdef"


class FakeSMTP:
    instances = []
    fail_with = None

    def __init__(self, host, port, timeout=None, context=None):
        self.host = host
        self.port = port
        self.calls = []
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def ehlo(self):
        self.calls.append("ehlo")

    def starttls(self, context=None):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(("login", username))

    def send_message(self, msg):
        if FakeSMTP.fail_with is not None:
            raise FakeSMTP.fail_with
        self.sent.append(msg)


@pytest.fixture()
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_with = None
    monkeypatch.setattr(email_service.smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(email_service.smtplib, "SMTP_SSL", FakeSMTP)
    monkeypatch.setattr(settings, "email_backend", "smtp")
    monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(settings, "smtp_port", 587)
    monkeypatch.setattr(settings, "smtp_from", "PeerPrep <no-reply@example.com>")
    monkeypatch.setattr(settings, "smtp_username", "mailer@example.com")
    monkeypatch.setattr(settings, "smtp_password", "secret")
    monkeypatch.setattr(settings, "smtp_use_tls", True)
    monkeypatch.setattr(settings, "smtp_use_ssl", False)
    return FakeSMTP


def test_disabled_backend_drops_mail(monkeypatch, fake_smtp):
    monkeypatch.setattr(settings, "email_backend", "disabled")

    assert EmailService.send_email_verification(to_email="a@b.com", verification_link=LINK) is False
    assert fake_smtp.instances == []


def test_console_backend_logs_the_link(monkeypatch, caplog, fake_smtp):
    monkeypatch.setattr(settings, "email_backend", "console")

    with caplog.at_level(logging.INFO, logger=email_service.__name__):
        assert EmailService.send_email_verification(to_email="a@b.com", verification_link=LINK) is True

    assert "a@b.com" in caplog.text
    assert LINK in caplog.text
    assert fake_smtp.instances == []


def test_unknown_backend_returns_false(monkeypatch, caplog):
    monkeypatch.setattr(settings, "email_backend", "carrier-pigeon")

    with caplog.at_level(logging.ERROR, logger=email_service.__name__):
        assert EmailService.send_email(to_email="a@b.com", subject="s", text_body="b") is False
    assert "carrier-pigeon" in caplog.text


def test_smtp_sends_plain_and_html_bodies(fake_smtp):
    assert EmailService.send_email_verification(to_email="a@b.com", verification_link=LINK) is True

    server = fake_smtp.instances[0]
    assert (server.host, server.port) == ("smtp.example.com", 587)
    assert server.calls == ["ehlo", "starttls", "ehlo", ("login", "mailer@example.com")]

    msg = server.sent[0]
    assert msg["To"] == "a@b.com"
    assert msg["From"] == "PeerPrep <no-reply@example.com>"
    assert msg["Subject"] == settings.verification_email_subject
    assert LINK in msg.get_body(("plain",)).get_content()
    html_body = msg.get_body(("html",)).get_content()
    assert f'href="{LINK}"' in html_body


def test_smtp_over_ssl_skips_starttls(monkeypatch, fake_smtp):
    monkeypatch.setattr(settings, "smtp_use_ssl", True)
    monkeypatch.setattr(settings, "smtp_port", 465)

    assert EmailService.send_email(to_email="a@b.com", subject="s", text_body="b") is True

    server = fake_smtp.instances[0]
    assert server.port == 465
    assert "starttls" not in server.calls
    assert len(server.sent) == 1


def test_from_header_falls_back_to_smtp_username(monkeypatch, fake_smtp):
    monkeypatch.setattr(settings, "smtp_from", None)

    assert EmailService.send_email(to_email="a@b.com", subject="s", text_body="b") is True
    assert fake_smtp.instances[0].sent[0]["From"] == "mailer@example.com"


@pytest.mark.parametrize("field", ["smtp_host", "smtp_from"])
def test_smtp_misconfiguration_returns_false(monkeypatch, caplog, fake_smtp, field):
    monkeypatch.setattr(settings, field, None)
    if field == "smtp_from":
        monkeypatch.setattr(settings, "smtp_username", "not-an-address")

    with caplog.at_level(logging.ERROR, logger=email_service.__name__):
        assert EmailService.send_email_verification(to_email="a@b.com", verification_link=LINK) is False

    assert "SMTP mal configurado" in caplog.text
    assert fake_smtp.instances == []


@pytest.mark.parametrize(
    "error",
    [smtplib.SMTPRecipientsRefused({"a@b.com": (550, b"no such user")}), ConnectionResetError("reset")],
)
def test_smtp_failures_are_logged_and_never_raise(caplog, fake_smtp, error):
    fake_smtp.fail_with = error

    with caplog.at_level(logging.ERROR, logger=email_service.__name__):
        assert EmailService.send_email_verification(to_email="a@b.com", verification_link=LINK) is False

    assert "No se pudo enviar email a a@b.com" in caplog.text


def test_smtp_connection_refused_returns_false(monkeypatch, fake_smtp):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("refused")

    monkeypatch.setattr(email_service.smtplib, "SMTP", refuse)

    assert EmailService.send_email(to_email="a@b.com", subject="s", text_body="b") is False


def test_html_template_escapes_values():
    html_body = EmailService._render_html_template(
        title="<Verify>",
        message="a & b",
        cta_text="Go",
        cta_link='http://x/"y"',
    )

    assert "&lt;Verify&gt;" in html_body
    assert "a &amp; b" in html_body
    assert 'href="http://x/&quot;y&quot;"' in html_body


def test_background_notifier_queues_verification_mail():
    tasks = BackgroundTasks()

    BackgroundNotifier(tasks).send_email_verification(to_email="a@b.com", verification_link=LINK)

    assert len(tasks.tasks) == 1
    task = tasks.tasks[0]
    assert task.func is EmailService.send_email_verification
    assert task.kwargs == {"to_email": "a@b.com", "verification_link": LINK}
