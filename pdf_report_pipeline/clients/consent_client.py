"""
Abstract base class for credential consent implementations.

The consent provider is the "identity" subsystem: it obtains an access token
through an interactive grant and revokes it on sign-out. Like the exporter it
has its own asynchronous initialization.
"""

from abc import ABC, abstractmethod


class ConsentProvider(ABC):
    """Obtains and revokes access tokens for the export step."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the identity library (e.g. load endpoint configuration).

        Raises:
            CredentialError: If the provider cannot be initialized.
        """
        pass

    @abstractmethod
    async def request_token(self) -> str:
        """Run the interactive consent flow and return an access token.

        Returns:
            Access token granted by the provider.

        Raises:
            ConsentDeniedError: If the user declines or the grant expires.
            CredentialError: For provider or transport errors.
        """
        pass

    @abstractmethod
    async def revoke_token(self, token: str) -> None:
        """Invalidate token with the provider.

        Args:
            token: Access token to revoke.

        Raises:
            CredentialError: If the provider refuses the revocation.
        """
        pass
