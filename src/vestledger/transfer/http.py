"""
HttpAssetTransfer - payouts through a custodial transfer API.

POSTs each transfer to ``{base_url}/transfers`` with an idempotency key, so
retries of a transient failure can never pay twice. Network errors, 429 and
5xx responses are retried with exponential backoff; any other non-2xx
response is a terminal failure. When retries run out after an attempt the
custodian may have executed, the result is reported as pending rather than
failed, and the caller re-submits it later under the same key.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from vestledger.core.exceptions import ConfigurationError
from vestledger.core.logging import get_logger
from vestledger.core.types import TransferResult
from vestledger.transfer.base import AssetTransfer

if TYPE_CHECKING:
    from vestledger.core.config import Config

logger = get_logger("transfer.http")


class TransientTransferError(Exception):
    """Retryable failure talking to the transfer API."""


def is_transient_error(exception: BaseException) -> bool:
    """Check if exception is a transient network/infrastructure error."""
    if isinstance(exception, (TransientTransferError, httpx.TransportError)):
        return True
    if isinstance(exception, httpx.HTTPStatusError):
        status = exception.response.status_code
        return status == 429 or 500 <= status < 600
    return False


def may_have_reached_custodian(exception: BaseException) -> bool:
    """
    Whether a failed attempt might still have been executed by the custodian.

    Connection failures and 429 responses are known not to have been
    processed; read timeouts, dropped responses and 5xx may have been.
    """
    if isinstance(exception, (httpx.ConnectError, httpx.ConnectTimeout)):
        return False
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code >= 500
    return is_transient_error(exception)


class HttpAssetTransfer(AssetTransfer):
    """Adapter for a custodial REST transfer API."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        max_attempts: int = 5,
        backoff_max: float = 16.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            base_url: API root, e.g. https://custody.example.com/v1
            api_key: Bearer token sent with every request
            timeout: Per-request timeout in seconds
            max_attempts: Attempts per transfer including the first
            backoff_max: Upper bound of the exponential backoff in seconds
            http_client: Shared httpx client; created lazily when omitted
        """
        if not base_url:
            raise ConfigurationError("transfer API base_url is required")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._backoff_max = backoff_max
        self._http_client = http_client
        self._owns_http_client = False

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> HttpAssetTransfer:
        if not config.transfer_api_url:
            raise ConfigurationError("VESTLEDGER_TRANSFER_API_URL is not set")
        return cls(
            base_url=config.transfer_api_url,
            api_key=config.transfer_api_key,
            timeout=config.request_timeout,
            **kwargs,
        )

    def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy-init HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_http_client = True
        return self._http_client

    def _headers(self, idempotency_key: str) -> dict[str, str]:
        headers = {"Idempotency-Key": idempotency_key}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _post_transfer(self, payload: dict[str, Any], idempotency_key: str) -> dict[str, Any]:
        client = self._get_http_client()
        response = await client.post(
            f"{self._base_url}/transfers",
            json=payload,
            headers=self._headers(idempotency_key),
            timeout=self._timeout,
        )
        response.raise_for_status()
        try:
            body = response.json()
        except ValueError:
            raise TransientTransferError(
                f"Unreadable transfer response: {response.text[:200]!r}"
            ) from None
        if body.get("status") == "pending":
            raise TransientTransferError(f"Transfer {body.get('id')} still pending")
        return body

    async def transfer(
        self,
        asset: str,
        destination: str,
        amount: int,
        idempotency_key: str | None = None,
    ) -> TransferResult:
        idempotency_key = idempotency_key or str(uuid.uuid4())
        payload = {
            "asset": asset,
            "destination": destination,
            "amount": str(amount),
        }
        maybe_accepted = False

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception(is_transient_error),
                wait=wait_exponential(multiplier=1, min=0, max=self._backoff_max),
                stop=stop_after_attempt(self._max_attempts),
                reraise=False,
                before_sleep=lambda state: logger.warning(
                    f"Retrying transfer to {destination}... "
                    f"(Attempt {state.attempt_number})"
                ),
            ):
                with attempt:
                    try:
                        body = await self._post_transfer(payload, idempotency_key)
                    except Exception as e:
                        maybe_accepted = maybe_accepted or may_have_reached_custodian(e)
                        raise
        except RetryError as e:
            cause = e.last_attempt.exception()
            if maybe_accepted:
                return self._unconfirmed(asset, destination, amount, idempotency_key, cause)
            return self._failure(asset, destination, amount, f"Transfer API unavailable: {cause}")
        except httpx.HTTPStatusError as e:
            return self._failure(
                asset,
                destination,
                amount,
                f"Transfer rejected with HTTP {e.response.status_code}: {e.response.text}",
            )

        if body.get("status") != "completed":
            return self._failure(
                asset, destination, amount, body.get("error") or f"Transfer {body.get('status')}"
            )

        return TransferResult(
            success=True,
            asset=asset,
            destination=destination,
            amount=amount,
            tx_reference=body.get("id"),
            metadata={"idempotency_key": idempotency_key},
        )

    def _failure(self, asset: str, destination: str, amount: int, error: str) -> TransferResult:
        logger.warning(f"Transfer of {amount} {asset} to {destination} failed: {error}")
        return TransferResult(
            success=False,
            asset=asset,
            destination=destination,
            amount=amount,
            error=error,
        )

    def _unconfirmed(
        self,
        asset: str,
        destination: str,
        amount: int,
        idempotency_key: str,
        cause: BaseException | None,
    ) -> TransferResult:
        logger.warning(
            f"Transfer of {amount} {asset} to {destination} unconfirmed "
            f"(idempotency key {idempotency_key}): {cause}"
        )
        return TransferResult(
            success=False,
            asset=asset,
            destination=destination,
            amount=amount,
            pending=True,
            error=f"Transfer outcome unknown: {cause}",
            metadata={"idempotency_key": idempotency_key},
        )

    async def close(self) -> None:
        """Close owned HTTP client."""
        if self._owns_http_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None
