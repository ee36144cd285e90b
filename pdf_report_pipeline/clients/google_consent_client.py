"""Google OAuth consent providers.

GoogleDeviceConsentProvider implements the OAuth 2.0 device authorization
grant: it asks Google for a user code, shows the verification URL and code to
the user, and polls the token endpoint until the user approves, declines, or
the code expires. Endpoints come from Google's OpenID configuration, loaded by
initialize().

StaticTokenConsentProvider hands out a pre-issued access token from
configuration, for headless runs.
"""

import asyncio
from collections.abc import Awaitable, Callable
import logging
from typing import Any

import requests

from ..domain.config import GoogleConfig
from .consent_client import ConsentProvider
from .exceptions import ConsentDeniedError, CredentialError

logger = logging.getLogger(__name__)

DEVICE_CODE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"
SLOW_DOWN_INCREMENT = 5

UserCodeCallback = Callable[[str, str], None]


def _log_user_code(verification_url: str, user_code: str) -> None:
    logger.warning(
        f"To authorize Google Docs export, visit {verification_url} "
        f"and enter the code: {user_code}"
    )


class GoogleDeviceConsentProvider(ConsentProvider):
    """Consent through Google's OAuth device authorization flow.

    Example:
        >>> provider = GoogleDeviceConsentProvider(GoogleConfig(client_id="..."))
        >>> await provider.initialize()
        >>> token = await provider.request_token()
    """

    def __init__(
        self,
        config: GoogleConfig,
        session: requests.Session | None = None,
        on_user_code: UserCodeCallback | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the provider.

        Args:
            config: Google configuration (client credentials, scopes, URLs).
            session: Optional requests session, mainly for tests.
            on_user_code: Called with (verification_url, user_code) when the
                user must act. Defaults to a log line.
            sleep: Awaitable sleep used between token polls.
        """
        self.config = config
        self._session = session or requests.Session()
        self._on_user_code = on_user_code or _log_user_code
        self._sleep = sleep
        self._endpoints: dict[str, str] | None = None

    async def initialize(self) -> None:
        """Load the device, token and revocation endpoints.

        Raises:
            CredentialError: If the OpenID configuration cannot be loaded or
                lacks a required endpoint.
        """
        configuration = await asyncio.to_thread(self._load_openid_configuration)
        endpoints = {}
        for key in (
            "device_authorization_endpoint",
            "token_endpoint",
            "revocation_endpoint",
        ):
            value = configuration.get(key)
            if not value:
                raise CredentialError(f"OpenID configuration is missing '{key}'")
            endpoints[key] = value
        self._endpoints = endpoints
        logger.info("Google identity client initialized")

    def _load_openid_configuration(self) -> dict[str, Any]:
        try:
            response = self._session.get(
                self.config.openid_configuration_url,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            error_msg = f"Failed to load OpenID configuration: {str(e)}"
            logger.error(error_msg)
            raise CredentialError(error_msg, original_exception=e) from e
        if response.status_code != 200:
            error_msg = (
                f"Failed to load OpenID configuration: "
                f"{response.status_code} {response.reason}"
            )
            logger.error(error_msg)
            raise CredentialError(error_msg)
        return response.json()

    def _endpoint(self, key: str) -> str:
        if self._endpoints is None:
            raise CredentialError("Google identity client is not initialized")
        return self._endpoints[key]

    async def request_token(self) -> str:
        """Run the device flow and return the granted access token.

        Raises:
            ConsentDeniedError: If the user declines or the code expires.
            CredentialError: For any other provider or transport error.
        """
        grant = await asyncio.to_thread(
            self._post,
            self._endpoint("device_authorization_endpoint"),
            {
                "client_id": self.config.client_id,
                "scope": " ".join(self.config.scopes),
            },
        )
        if grant.status_code != 200:
            raise CredentialError(
                f"Device authorization request failed: "
                f"{grant.status_code} {self._error_code(grant)}"
            )

        payload = self._json_body(grant, "Device authorization response")
        device_code = payload.get("device_code")
        user_code = payload.get("user_code")
        if not device_code or not user_code:
            raise CredentialError(
                "Device authorization response did not contain "
                "device_code and user_code"
            )
        try:
            interval = float(payload.get("interval", 5))
            expires_in = float(payload.get("expires_in", 1800))
        except (TypeError, ValueError) as e:
            raise CredentialError(
                "Device authorization response has an invalid interval or "
                "expiry",
                original_exception=e,
            ) from e
        verification_url = payload.get("verification_url") or payload.get(
            "verification_uri", ""
        )
        self._on_user_code(verification_url, user_code)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + expires_in
        token_data = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "device_code": device_code,
            "grant_type": DEVICE_CODE_GRANT_TYPE,
        }

        while loop.time() < deadline:
            await self._sleep(interval)
            response = await asyncio.to_thread(
                self._post, self._endpoint("token_endpoint"), token_data
            )
            if response.status_code == 200:
                body = self._json_body(response, "Token response")
                access_token = body.get("access_token")
                if not access_token:
                    raise CredentialError(
                        "Token response did not contain access_token"
                    )
                return access_token

            error_code = self._error_code(response)
            if error_code == "authorization_pending":
                continue
            if error_code == "slow_down":
                interval += SLOW_DOWN_INCREMENT
                continue
            if error_code in ("access_denied", "expired_token"):
                raise ConsentDeniedError(f"Consent not granted: {error_code}")
            raise CredentialError(
                f"Token request failed: {response.status_code} {error_code}"
            )

        raise ConsentDeniedError("Consent not granted: device code expired")

    async def revoke_token(self, token: str) -> None:
        """Revoke token at Google's revocation endpoint.

        Raises:
            CredentialError: If Google refuses the revocation.
        """
        response = await asyncio.to_thread(
            self._post, self._endpoint("revocation_endpoint"), {"token": token}
        )
        if response.status_code != 200:
            raise CredentialError(
                f"Token revocation failed: "
                f"{response.status_code} {self._error_code(response)}"
            )
        logger.debug("Access token revoked with Google")

    def _post(self, url: str, data: dict[str, str]) -> requests.Response:
        try:
            return self._session.post(
                url, data=data, timeout=self.config.request_timeout
            )
        except requests.RequestException as e:
            error_msg = f"Request to {url} failed: {str(e)}"
            logger.error(error_msg)
            raise CredentialError(error_msg, original_exception=e) from e

    @staticmethod
    def _json_body(response: requests.Response, what: str) -> dict[str, Any]:
        """Decode a JSON object body, or raise CredentialError."""
        try:
            body = response.json()
        except ValueError as e:
            raise CredentialError(
                f"{what} is not valid JSON", original_exception=e
            ) from e
        if not isinstance(body, dict):
            raise CredentialError(f"{what} is not a JSON object")
        return body

    @staticmethod
    def _error_code(response: requests.Response) -> str:
        """Return the OAuth error code of a failed response, or its reason."""
        try:
            body = response.json()
        except ValueError:
            return response.reason or "unknown error"
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            return body["error"]
        return response.reason or "unknown error"


class StaticTokenConsentProvider(ConsentProvider):
    """Consent provider backed by a pre-issued access token."""

    def __init__(self, config: GoogleConfig) -> None:
        self.config = config

    async def initialize(self) -> None:
        logger.debug("Static token consent provider ready")

    async def request_token(self) -> str:
        if not self.config.access_token:
            raise ConsentDeniedError("No access token configured")
        return self.config.access_token

    async def revoke_token(self, token: str) -> None:
        # Configured tokens are owned by whoever issued them.
        logger.debug("Static access token released without remote revocation")
