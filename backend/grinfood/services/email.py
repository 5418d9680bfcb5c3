"""Transactional email: the SendGrid sender and the account messages built on it."""

import logging
from abc import ABC, abstractmethod
from html import escape
from typing import Optional

import httpx

from grinfood.core.errors import CollaboratorFailure

logger = logging.getLogger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"

_BUTTON_STYLE = (
    "background:#4CAF50;color:white;padding:10px 20px;"
    "border-radius:6px;text-decoration:none;"
)


class EmailSender(ABC):
    @abstractmethod
    async def send(self, to: str, subject: str, html: str) -> None:
        """Deliver one HTML message."""

    async def close(self) -> None:
        pass


class SendGridEmailSender(EmailSender):
    def __init__(self, api_key: str, from_email: str, client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key
        self.from_email = from_email
        self._http_client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def send(self, to: str, subject: str, html: str) -> None:
        if not self.api_key or not self.from_email:
            raise CollaboratorFailure("SendGrid API key not configured")

        client = await self._get_client()
        try:
            response = await client.post(
                SENDGRID_SEND_URL,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "personalizations": [{"to": [{"email": to}]}],
                    "from": {"email": self.from_email},
                    "subject": subject,
                    "content": [{"type": "text/html", "value": html}],
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Email send error to {to}: {e}")
            raise CollaboratorFailure("Failed to send email") from e

        if response.status_code not in (200, 202):
            logger.error(f"SendGrid error: {response.status_code} - {response.text}")
            raise CollaboratorFailure("Failed to send email")
        logger.info(f"Email '{subject}' sent to {to}")

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


class AccountMailer:
    """Renders and sends the account lifecycle messages."""

    def __init__(self, sender: EmailSender):
        self.sender = sender

    async def send_reset(self, email: str, link: str) -> None:
        html = (
            "<p>Вітаємо!</p>"
            "<p>Щоб скинути пароль, натисніть кнопку нижче:</p>"
            f'<a href="{escape(link)}" style="{_BUTTON_STYLE}">Скинути пароль</a>'
            "<p>Якщо ви не запитували скидання - просто ігноруйте цей лист.</p>"
            "<br /><small>GrinFood Team</small>"
        )
        await self.sender.send(email, "🔐 Скидання пароля до GrinFood", html)

    async def send_verification(self, email: str, link: str) -> None:
        html = (
            "<p>Привіт!</p>"
            "<p>Щоб підтвердити вашу пошту, натисніть кнопку нижче:</p>"
            f'<a href="{escape(link)}" style="{_BUTTON_STYLE}">Підтвердити пошту</a>'
            "<p>Якщо це були не ви - проігноруйте це повідомлення.</p>"
        )
        await self.sender.send(email, "🔐 Підтвердження пошти GrinFood", html)

    async def send_profile_updated(self, email: str, name: str) -> None:
        html = (
            f"<p>Привіт, <strong>{escape(name)}</strong>!</p>"
            "<p>Ваш профіль був успішно оновлений.</p>"
            "<p>Якщо це були не ви - терміново змініть пароль.</p>"
            "<br /><small>З повагою, команда GrinFood</small>"
        )
        await self.sender.send(email, "✅ Ваш профіль GrinFood оновлено", html)
