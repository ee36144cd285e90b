"""
Credential lifecycle for the export step.

CredentialManager owns the single access token used by exports. Its lifecycle
is Unset -> Valid (interactive grant) -> Unset (sign-out, or an export
rejected for authentication). It is unusable until both the API client and
the identity subsystem have finished their asynchronous initialization; each
initialization is tracked as its own future and readiness is derived from
both.
"""

import asyncio
from collections.abc import Awaitable, Callable
import logging

from pdf_report_pipeline.clients.consent_client import ConsentProvider
from pdf_report_pipeline.clients.exceptions import (
    ConsentDeniedError,
    CredentialError,
    NotReadyError,
)
from pdf_report_pipeline.domain.models import (
    CredentialState,
    CredentialStatus,
    CredentialUnset,
    CredentialValid,
)
from pdf_report_pipeline.utils.logging import log_credential_change

CredentialObserver = Callable[[CredentialState], None]

NOT_READY_MESSAGE = "Google Auth is not ready yet. Please try again in a moment."


class CredentialManager:
    """Owns the export access token and its readiness gate.

    Example:
        >>> manager = CredentialManager(consent_provider)
        >>> manager.attach_readiness(exporter.initialize(), consent.initialize())
        >>> await manager.wait_ready()
        True
        >>> await manager.request_grant()
        True
        >>> manager.is_valid()
        True
    """

    def __init__(self, consent_provider: ConsentProvider) -> None:
        self.consent_provider = consent_provider
        self.logger = logging.getLogger(__name__)
        self._state: CredentialState = CredentialUnset()
        self._api_client_ready: asyncio.Future | None = None
        self._identity_ready: asyncio.Future | None = None
        self._granting = False
        self._observers: list[CredentialObserver] = []

    @property
    def state(self) -> CredentialState:
        return self._state

    def subscribe(self, observer: CredentialObserver) -> None:
        self._observers.append(observer)

    def attach_readiness(
        self, api_client_init: Awaitable[None], identity_init: Awaitable[None]
    ) -> None:
        """Start tracking both subsystem initializations.

        Must be called from a running event loop.

        Args:
            api_client_init: Initialization of the export API client.
            identity_init: Initialization of the consent/identity library.
        """
        self._api_client_ready = asyncio.ensure_future(api_client_init)
        self._identity_ready = asyncio.ensure_future(identity_init)

    @property
    def ready(self) -> bool:
        """True once both subsystems initialized without error."""
        return _succeeded(self._api_client_ready) and _succeeded(
            self._identity_ready
        )

    async def wait_ready(self) -> bool:
        """Wait for both initializations to settle.

        Returns:
            The readiness flag. Initialization errors are logged, not raised.
        """
        pending = [
            future
            for future in (self._api_client_ready, self._identity_ready)
            if future is not None
        ]
        outcomes = await asyncio.gather(*pending, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                self.logger.error(f"Subsystem initialization failed: {outcome}")
        return self.ready

    def is_valid(self) -> bool:
        return self._state.status is CredentialStatus.VALID

    def current_token(self) -> str | None:
        """The held access token, or None while Unset."""
        if isinstance(self._state, CredentialValid):
            return self._state.token
        return None

    async def request_grant(self) -> bool:
        """Run the interactive consent flow.

        Returns:
            True when a token was granted (or already held), False when the
            user declined or the provider failed. Those failures are logged
            and leave the credential Unset.

        Raises:
            NotReadyError: If the subsystems are not initialized yet.
        """
        self._require_ready()
        if self.is_valid():
            self.logger.debug("Credential already valid, skipping consent flow")
            return True
        if self._granting:
            self.logger.debug("Consent flow already in progress")
            return False

        self._granting = True
        try:
            token = await self.consent_provider.request_token()
        except ConsentDeniedError as e:
            self.logger.warning(f"Google Auth: consent not granted: {e}")
            self._set_state(CredentialUnset())
            return False
        except CredentialError as e:
            self.logger.error(f"Google Auth Error: {e}")
            self._set_state(CredentialUnset())
            return False
        except Exception as e:
            self.logger.error(f"Google Auth Error: {e}", exc_info=True)
            self._set_state(CredentialUnset())
            return False
        finally:
            self._granting = False

        if not isinstance(token, str) or not token:
            self.logger.error("Google Auth Error: provider returned no access token")
            self._set_state(CredentialUnset())
            return False

        self._set_state(CredentialValid(token=token))
        log_credential_change(self.logger, signed_in=True)
        return True

    async def revoke(self) -> bool:
        """Revoke the held token with the provider and return to Unset.

        Returns:
            True if a credential was held and is now Unset, False when there
            was nothing to revoke.

        Raises:
            NotReadyError: If the subsystems are not initialized yet.
        """
        self._require_ready()
        token = self.current_token()
        if token is None:
            return False

        try:
            await self.consent_provider.revoke_token(token)
        except CredentialError as e:
            self.logger.warning(f"Remote token revocation failed: {e}")
        except Exception as e:
            self.logger.warning(f"Remote token revocation failed: {e}", exc_info=True)
        finally:
            self._set_state(CredentialUnset())

        log_credential_change(self.logger, signed_in=False)
        return True

    def invalidate(self) -> None:
        """Drop the held token after the export API rejected it.

        No remote call is made; the provider has already refused the token.
        """
        if self.is_valid():
            self.logger.warning("Access token rejected, credential cleared")
        self._set_state(CredentialUnset())

    def _require_ready(self) -> None:
        if not self.ready:
            raise NotReadyError(NOT_READY_MESSAGE)

    def _set_state(self, state: CredentialState) -> None:
        self._state = state
        for observer in self._observers:
            observer(state)


def _succeeded(future: asyncio.Future | None) -> bool:
    return (
        future is not None
        and future.done()
        and not future.cancelled()
        and future.exception() is None
    )
