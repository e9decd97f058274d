from __future__ import annotations

import logging
from enum import Enum
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ..models import PersonalInfo
from .periods import DateRange

logger = logging.getLogger(__name__)

TOKEN_URL = "https://cloud.ouraring.com/personal-access-tokens"

SLEEP_ENDPOINT = "daily_sleep"
ACTIVITY_ENDPOINT = "daily_activity"
STRESS_ENDPOINT = "daily_stress"
READINESS_ENDPOINT = "daily_readiness"
PERSONAL_INFO_ENDPOINT = "personal_info"

ModelT = TypeVar("ModelT", bound=BaseModel)


class OuraErrorKind(str, Enum):
    configuration_missing = "configuration_missing"
    authentication_failed = "authentication_failed"
    authorization_failed = "authorization_failed"
    rate_limited = "rate_limited"
    upstream_error = "upstream_error"
    malformed_response = "malformed_response"
    timeout = "timeout"


SETUP_REQUIRED_MESSAGE = (
    "🔑 **Setup Required**: Please configure your Oura API token.\n\n"
    "**Steps to fix:**\n"
    f"1. Get your token from [Oura Cloud]({TOKEN_URL})\n"
    "2. Set it as the `OURA_API_TOKEN` environment variable\n"
    "3. Restart the application\n\n"
    "*This is a one-time setup step required to access your Oura Ring data.*"
)

_STATUS_ERRORS = {
    401: (
        OuraErrorKind.authentication_failed,
        "Invalid Oura API token",
        "🚫 **Authentication Failed**: Your Oura API token is invalid or expired.\n\n"
        "**Steps to fix:**\n"
        f"1. Check your token at [Oura Cloud]({TOKEN_URL})\n"
        "2. Generate a new token if needed\n"
        "3. Update `OURA_API_TOKEN` with the new token\n"
        "4. Restart the application",
    ),
    403: (
        OuraErrorKind.authorization_failed,
        "Access forbidden",
        "⛔ **Access Denied**: Cannot access your Oura data.\n\n"
        "**Possible causes:**\n"
        "• Your Oura subscription may have expired\n"
        "• Your API token doesn't have the required permissions\n"
        "• Your account may be restricted\n\n"
        "*Please check your Oura account status and token permissions.*",
    ),
    429: (
        OuraErrorKind.rate_limited,
        "Rate limit exceeded",
        "⏳ **Rate Limit Reached**: Too many requests to the Oura API.\n\n"
        "Please wait a few minutes before trying again. The Oura API allows "
        "5000 requests per 5-minute period.",
    ),
}


def _temporary_failure_message(detail: str) -> str:
    return (
        f"❌ **API Error**: Unable to fetch your Oura data ({detail}).\n\n"
        "This might be a temporary issue. Please try again in a few moments."
    )


class OuraAPIError(Exception):
    """Upstream failure carrying both a technical and a user-facing message."""

    def __init__(self, kind: OuraErrorKind, message: str, user_message: str):
        super().__init__(message)
        self.kind = kind
        self.user_message = user_message

    @classmethod
    def configuration_missing(cls) -> OuraAPIError:
        return cls(
            OuraErrorKind.configuration_missing,
            "Oura API token not configured",
            SETUP_REQUIRED_MESSAGE,
        )

    @classmethod
    def timed_out(cls, endpoint: str, detail: str = "") -> OuraAPIError:
        message = f"Timed out requesting {endpoint}"
        if detail:
            message += f": {detail}"
        return cls(
            OuraErrorKind.timeout, message, _temporary_failure_message("timeout")
        )

    @classmethod
    def from_response(cls, response: httpx.Response) -> OuraAPIError:
        known = _STATUS_ERRORS.get(response.status_code)
        if known:
            kind, message, user_message = known
            return cls(kind, message, user_message)

        message = f"Oura API error: {response.status_code} {response.reason_phrase}"
        if response.text:
            message += f"\nDetails: {response.text}"
        return cls(
            OuraErrorKind.upstream_error,
            message,
            _temporary_failure_message(str(response.status_code)),
        )


class OuraClient:
    """Authenticated GET access to the Oura v2 user collection endpoints."""

    def __init__(self, http: httpx.AsyncClient, *, token: str, api_base: str):
        self._http = http
        self._token = token
        self._api_base = api_base.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self._token)

    async def _get_json(
        self, endpoint: str, params: dict[str, str] | None = None
    ) -> dict[str, Any]:
        if not self._token:
            raise OuraAPIError.configuration_missing()

        url = f"{self._api_base}/v2/usercollection/{endpoint}"
        logger.debug("GET %s params=%s", endpoint, params)
        try:
            response = await self._http.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {self._token}"},
            )
        except httpx.TimeoutException as exc:
            raise OuraAPIError.timed_out(endpoint, str(exc)) from exc
        except httpx.HTTPError as exc:
            raise OuraAPIError(
                OuraErrorKind.upstream_error,
                f"Request to {endpoint} failed: {exc}",
                _temporary_failure_message("connection error"),
            ) from exc

        if response.is_error:
            raise OuraAPIError.from_response(response)

        try:
            payload = response.json()
        except ValueError as exc:
            raise OuraAPIError(
                OuraErrorKind.malformed_response,
                f"Non-JSON response from {endpoint}",
                _temporary_failure_message("unreadable response"),
            ) from exc
        if not isinstance(payload, dict):
            raise OuraAPIError(
                OuraErrorKind.malformed_response,
                f"Unexpected payload type from {endpoint}: {type(payload).__name__}",
                _temporary_failure_message("unreadable response"),
            )
        return payload

    async def get_collection(
        self, endpoint: str, model: type[ModelT], date_range: DateRange
    ) -> list[ModelT]:
        # Single page only; next_token is not followed.
        payload = await self._get_json(endpoint, date_range.as_params())
        data = payload.get("data")
        if not isinstance(data, list):
            raise OuraAPIError(
                OuraErrorKind.malformed_response,
                f"Missing data array in {endpoint} response",
                _temporary_failure_message("unreadable response"),
            )
        try:
            return [model.model_validate(entry) for entry in data]
        except ValidationError as exc:
            raise OuraAPIError(
                OuraErrorKind.malformed_response,
                f"Invalid {endpoint} document: {exc}",
                _temporary_failure_message("unreadable response"),
            ) from exc

    async def get_personal_info(self) -> PersonalInfo:
        payload = await self._get_json(PERSONAL_INFO_ENDPOINT)
        try:
            return PersonalInfo.model_validate(payload)
        except ValidationError as exc:
            raise OuraAPIError(
                OuraErrorKind.malformed_response,
                f"Invalid personal_info document: {exc}",
                _temporary_failure_message("unreadable response"),
            ) from exc
