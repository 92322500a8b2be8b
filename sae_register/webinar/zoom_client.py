import logging
from typing import Protocol

import httpx

from sae_register.invitations.exceptions import WebinarRegistrationFailed
from sae_register.webinar.base import RegistrantDTO, WebinarClientBase, WebinarRegistrantDTO

logger = logging.getLogger(__name__)


class ZoomConfig(Protocol):
    zoom_account_id: str
    zoom_client_id: str
    zoom_client_secret: str
    zoom_oauth_url: str
    zoom_api_base_url: str


def _provider_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("reason") or payload)
    return str(payload)


def _success_payload(response: httpx.Response, operation: str) -> dict:
    """JSON object of a 2xx reply; anything else counts as a failed call."""
    try:
        payload = response.json()
    except ValueError as e:
        logger.error("Zoom %s reply is not JSON: %.200s", operation, response.text)
        raise WebinarRegistrationFailed(
            f"Zoom {operation} reply could not be parsed", status_code=response.status_code
        ) from e
    if not isinstance(payload, dict):
        logger.error("Zoom %s reply is not a JSON object: %.200s", operation, response.text)
        raise WebinarRegistrationFailed(
            f"Zoom {operation} reply could not be parsed", status_code=response.status_code
        )
    return payload


class ZoomWebinarClient(WebinarClientBase):
    """Zoom server-to-server OAuth app: account credentials grant, then registrants API."""

    def __init__(
        self,
        config: ZoomConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 15.0,
    ):
        self._config = config
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    async def get_access_token(self) -> str:
        try:
            async with self._client() as client:
                response = await client.post(
                    self._config.zoom_oauth_url,
                    auth=(self._config.zoom_client_id, self._config.zoom_client_secret),
                    data={
                        "grant_type": "account_credentials",
                        "account_id": self._config.zoom_account_id,
                    },
                )
        except httpx.HTTPError as e:
            logger.error("Zoom token request failed: %s", e)
            raise WebinarRegistrationFailed(f"Zoom token request failed: {e}") from e

        if not response.is_success:
            message = _provider_message(response)
            logger.error("Zoom token request rejected (%s): %s", response.status_code, message)
            raise WebinarRegistrationFailed(message, status_code=response.status_code)

        access_token = _success_payload(response, "token").get("access_token")
        if not access_token:
            raise WebinarRegistrationFailed("Zoom token response carried no access_token")
        return access_token

    async def create_registrant(
        self, access_token: str, registrant: RegistrantDTO
    ) -> WebinarRegistrantDTO:
        body = {
            "first_name": registrant.first_name,
            "last_name": registrant.last_name,
            "email": registrant.email,
        }
        if registrant.org:
            body["org"] = registrant.org

        url = f"{self._config.zoom_api_base_url}/webinars/{registrant.webinar_id}/registrants"
        try:
            async with self._client() as client:
                response = await client.post(
                    url,
                    headers={
                        "Authorization": f"Bearer {access_token}",
                        "Content-Type": "application/json",
                    },
                    json=body,
                )
        except httpx.HTTPError as e:
            logger.error("Zoom registrant request failed: %s", e)
            raise WebinarRegistrationFailed(f"Zoom registrant request failed: {e}") from e

        if not response.is_success:
            message = _provider_message(response)
            logger.error(
                "Zoom rejected registrant for webinar %s (%s): %s",
                registrant.webinar_id,
                response.status_code,
                message,
            )
            raise WebinarRegistrationFailed(message, status_code=response.status_code)

        data = _success_payload(response, "registrant")
        return WebinarRegistrantDTO(
            registrant_id=data.get("registrant_id") or data.get("id"),
            join_url=data.get("join_url"),
        )
