"""Ledger gateway client.

Talks to the signing gateway that holds the aggregator's authority key
and relays transactions to the markets program.

Gateway API:
- GET  /v1/markets/{address}              -> {"address", "state"}
- POST /v1/markets/{address}/transitions  -> {"signature", "confirmed_at"}
- GET  /v1/health

Status mapping:
- 404                      -> SubjectNotFoundError
- 409                      -> StaleStateError
- 400, 422, other 4xx      -> RejectedByLedgerError
- 429, 503                 -> LedgerCongestionError (Retry-After honoured)
- other 5xx, timeouts, I/O -> LedgerNetworkError
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from vote_aggregator.config.infrastructure_config import LedgerGatewayConfig
from vote_aggregator.domain.errors import (
    LedgerCongestionError,
    LedgerError,
    LedgerNetworkError,
    RejectedByLedgerError,
    StaleStateError,
    SubjectNotFoundError,
)
from vote_aggregator.domain.models.decision import AggregationDecision
from vote_aggregator.domain.models.ledger_subject import (
    LedgerSubject,
    LedgerSubjectState,
    TransactionReceipt,
)
from vote_aggregator.infrastructure.adapters.ledger.address import derive_market_address


class LedgerGatewayClient:
    """LedgerClientProtocol implementation over the HTTP signing gateway."""

    def __init__(
        self,
        config: LedgerGatewayConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the gateway client.

        Args:
            config: Gateway URL, program id and timeout.
            client: Optional pre-built HTTP client (tests inject a MockTransport).
        """
        self.config = config
        self._base_url = config.gateway_url.rstrip("/")
        self._timeout = config.timeout_seconds
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_state(self, subject_id: str) -> LedgerSubject:
        response = await self._request("GET", f"/v1/markets/{subject_id}", subject_id)
        if response.status_code != 200:
            self._raise_for_status(response, subject_id)

        data = self._decode(response, subject_id)
        try:
            state = LedgerSubjectState(str(data["state"]).upper())
        except (KeyError, ValueError) as e:
            raise LedgerError(
                f"Gateway returned malformed state for {subject_id}: {data!r}",
                subject_id=subject_id,
            ) from e
        return LedgerSubject(address=data.get("address", subject_id), state=state)

    async def submit_transition(
        self,
        subject_id: str,
        decision: AggregationDecision,
    ) -> TransactionReceipt:
        transition = decision.transition
        payload = {
            "transition": transition.value,
            "expected_state": transition.source_state.value,
            "outcome": decision.outcome.value,
            "approve_weight": decision.approve_weight,
            "reject_weight": decision.reject_weight,
            "total_voters": decision.total_voters,
        }
        response = await self._request(
            "POST",
            f"/v1/markets/{subject_id}/transitions",
            subject_id,
            json=payload,
        )
        if response.status_code not in (200, 201):
            self._raise_for_status(response, subject_id)

        data = self._decode(response, subject_id)
        try:
            signature = str(data["signature"])
            confirmed_at = data.get("confirmed_at")
            confirmed = (
                datetime.fromisoformat(confirmed_at)
                if confirmed_at
                else datetime.now(timezone.utc)
            )
        except (KeyError, TypeError, ValueError) as e:
            # The transaction may have landed; a retry re-reads state on conflict
            raise LedgerNetworkError(
                f"Gateway returned malformed receipt for {subject_id}: {data!r}",
                subject_id=subject_id,
            ) from e
        return TransactionReceipt(
            signature=signature,
            subject_id=subject_id,
            transition=transition,
            confirmed_at=confirmed,
        )

    def derive_subject_address(self, market_key: str) -> str:
        return derive_market_address(market_key, self.config.program_id)

    async def health_check(self) -> bool:
        """Check if the gateway is reachable."""
        try:
            response = await self._client.get("/v1/health", timeout=5)
        except httpx.RequestError:
            return False
        return response.status_code == 200

    async def _request(
        self,
        method: str,
        path: str,
        subject_id: str,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            return await self._client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise LedgerNetworkError(
                f"Gateway request timeout after {self._timeout}s",
                subject_id=subject_id,
            ) from e
        except httpx.RequestError as e:
            raise LedgerNetworkError(
                f"Gateway request failed: {e}", subject_id=subject_id
            ) from e

    def _decode(self, response: httpx.Response, subject_id: str) -> dict[str, Any]:
        """Parse a success body as a JSON object.

        Raises:
            LedgerNetworkError: If the body is not a JSON object, e.g. a proxy
                error page served with status 200.
        """
        try:
            data = response.json()
        except ValueError as e:
            raise LedgerNetworkError(
                f"Gateway returned a non-JSON body ({response.status_code})",
                subject_id=subject_id,
            ) from e
        if not isinstance(data, dict):
            raise LedgerNetworkError(
                f"Gateway returned unexpected body for {subject_id}: {data!r}",
                subject_id=subject_id,
            )
        return data

    def _raise_for_status(self, response: httpx.Response, subject_id: str) -> None:
        """Map a non-success gateway response to a ledger error."""
        status = response.status_code

        try:
            detail = response.json()
        except ValueError:
            detail = response.text
        message = (
            str(detail.get("detail", detail)) if isinstance(detail, dict) else str(detail)
        )
        code = detail.get("code") if isinstance(detail, dict) else None

        if status == 404:
            raise SubjectNotFoundError(subject_id)

        if status == 409:
            observed = detail.get("observed_state") if isinstance(detail, dict) else None
            raise StaleStateError(
                f"Stale state: {message}",
                subject_id=subject_id,
                observed_state=observed,
            )

        if status in (429, 503):
            raise LedgerCongestionError(
                f"Ledger congested ({status}): {message}",
                subject_id=subject_id,
                retry_after=_parse_retry_after(response.headers.get("Retry-After")),
            )

        if 500 <= status < 600:
            raise LedgerNetworkError(f"Gateway error: {status}", subject_id=subject_id)

        if 400 <= status < 500:
            raise RejectedByLedgerError(
                f"Transition rejected: {message}",
                subject_id=subject_id,
                code=code,
            )

        raise LedgerError(f"Unexpected status code: {status}", subject_id=subject_id)


def _parse_retry_after(value: str | None) -> float | None:
    """Retry-After in seconds; HTTP-date values are ignored."""
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
