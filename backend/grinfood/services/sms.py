"""One-time SMS codes through the Twilio Verify REST API."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import httpx

from grinfood.core.errors import CollaboratorFailure

logger = logging.getLogger(__name__)

TWILIO_VERIFY_URL = "https://verify.twilio.com/v2/Services/{service_sid}"


class SmsVerifier(ABC):
    @abstractmethod
    async def send_code(self, phone: str) -> str:
        """Send a code to ``phone`` and return the verification status."""

    @abstractmethod
    async def check_code(self, phone: str, code: str) -> Tuple[bool, str]:
        """Check ``code`` for ``phone``. Returns (approved, status)."""

    async def close(self) -> None:
        pass


class TwilioVerifyService(SmsVerifier):
    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        service_sid: str,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.service_sid = service_sid
        self._http_client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def _post(self, path: str, data: Dict[str, str]) -> Dict:
        if not (self.account_sid and self.auth_token and self.service_sid):
            raise CollaboratorFailure("Twilio Verify credentials not configured")

        client = await self._get_client()
        url = TWILIO_VERIFY_URL.format(service_sid=self.service_sid) + path
        try:
            response = await client.post(url, auth=(self.account_sid, self.auth_token), data=data)
        except httpx.HTTPError as e:
            logger.error(f"Twilio Verify request to {path} failed: {e}")
            raise CollaboratorFailure("SMS provider request failed") from e

        if response.status_code not in (200, 201):
            logger.error(f"Twilio error: {response.status_code} - {response.text}")
            raise CollaboratorFailure(f"SMS provider error: {response.status_code}")
        return response.json()

    async def send_code(self, phone: str) -> str:
        result = await self._post("/Verifications", {"To": phone, "Channel": "sms"})
        return result.get("status", "")

    async def check_code(self, phone: str, code: str) -> Tuple[bool, str]:
        result = await self._post("/VerificationCheck", {"To": phone, "Code": code})
        status = result.get("status", "")
        return status == "approved", status

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
