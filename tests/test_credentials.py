"""Tests for the credential lifecycle and its readiness gate."""

import asyncio

import pytest
from conftest import FakeConsentProvider

from pdf_report_pipeline.clients.exceptions import (
    CredentialError,
    NotReadyError,
)
from pdf_report_pipeline.domain.models import CredentialStatus, CredentialValid
from pdf_report_pipeline.orchestration.credentials import (
    NOT_READY_MESSAGE,
    CredentialManager,
)


async def _ready() -> None:
    return None


async def _failing() -> None:
    raise CredentialError("OpenID configuration is missing 'token_endpoint'")


async def _ready_manager(consent: FakeConsentProvider) -> CredentialManager:
    manager = CredentialManager(consent)
    manager.attach_readiness(_ready(), _ready())
    assert await manager.wait_ready() is True
    return manager


@pytest.mark.asyncio
async def test_not_ready_until_both_subsystems_initialize(consent) -> None:
    manager = CredentialManager(consent)
    api_ready = asyncio.Event()

    async def api_init() -> None:
        await api_ready.wait()

    manager.attach_readiness(api_init(), _ready())
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert manager.ready is False
    with pytest.raises(NotReadyError) as exc_info:
        await manager.request_grant()
    assert exc_info.value.message == NOT_READY_MESSAGE
    assert consent.requests == 0

    api_ready.set()
    assert await manager.wait_ready() is True
    assert manager.ready is True


@pytest.mark.asyncio
async def test_failed_initialization_keeps_manager_unready(consent) -> None:
    manager = CredentialManager(consent)
    manager.attach_readiness(_ready(), _failing())

    assert await manager.wait_ready() is False
    with pytest.raises(NotReadyError):
        await manager.revoke()


@pytest.mark.asyncio
async def test_grant_moves_credential_to_valid(consent) -> None:
    manager = await _ready_manager(consent)
    states = []
    manager.subscribe(states.append)

    assert await manager.request_grant() is True

    assert manager.is_valid()
    assert manager.current_token() == "token-123"
    assert states == [CredentialValid(token="token-123")]


@pytest.mark.asyncio
async def test_grant_when_already_valid_skips_consent(consent) -> None:
    manager = await _ready_manager(consent)
    await manager.request_grant()

    assert await manager.request_grant() is True
    assert consent.requests == 1


@pytest.mark.asyncio
async def test_denied_consent_leaves_credential_unset() -> None:
    consent = FakeConsentProvider(deny=True)
    manager = await _ready_manager(consent)

    assert await manager.request_grant() is False

    assert manager.state.status is CredentialStatus.UNSET
    assert manager.current_token() is None


@pytest.mark.asyncio
async def test_revoke_calls_provider_and_unsets(consent) -> None:
    manager = await _ready_manager(consent)
    await manager.request_grant()

    assert await manager.revoke() is True

    assert consent.revoked == ["token-123"]
    assert manager.is_valid() is False


@pytest.mark.asyncio
async def test_revoke_without_credential_does_nothing(consent) -> None:
    manager = await _ready_manager(consent)

    assert await manager.revoke() is False
    assert consent.revoked == []


@pytest.mark.asyncio
async def test_revoke_unsets_even_when_provider_refuses(consent) -> None:
    async def refuse(token: str) -> None:
        raise CredentialError("Token revocation failed: 400 invalid_token")

    consent.revoke_token = refuse
    manager = await _ready_manager(consent)
    await manager.request_grant()

    assert await manager.revoke() is True
    assert manager.is_valid() is False


@pytest.mark.asyncio
async def test_revoke_unsets_when_provider_breaks_unexpectedly(consent) -> None:
    async def broken(token: str) -> None:
        raise RuntimeError("socket closed")

    consent.revoke_token = broken
    manager = await _ready_manager(consent)
    await manager.request_grant()

    assert await manager.revoke() is True
    assert manager.state.status is CredentialStatus.UNSET


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [KeyError("device_code"), RuntimeError("boom")])
async def test_unexpected_grant_error_leaves_credential_unset(consent, error) -> None:
    async def broken() -> str:
        raise error

    consent.request_token = broken
    manager = await _ready_manager(consent)

    assert await manager.request_grant() is False
    assert manager.state.status is CredentialStatus.UNSET
    assert await manager.request_grant() is False


@pytest.mark.asyncio
async def test_grant_without_token_leaves_credential_unset() -> None:
    manager = await _ready_manager(FakeConsentProvider(token=""))

    assert await manager.request_grant() is False
    assert manager.current_token() is None


@pytest.mark.asyncio
async def test_invalidate_clears_token_without_remote_call(consent) -> None:
    manager = await _ready_manager(consent)
    await manager.request_grant()

    manager.invalidate()

    assert manager.current_token() is None
    assert consent.revoked == []


def test_valid_credential_repr_masks_token() -> None:
    assert "secret" not in repr(CredentialValid(token="secret"))
