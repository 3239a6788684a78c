"""In-memory LedgerClientProtocol implementation.

Models the markets program as a plain state machine: a transition is
accepted only from its source state, otherwise StaleStateError. Failures
and lost races can be injected for tests; confirmed transitions are
recorded in `submissions`.
"""

from __future__ import annotations

import asyncio
from collections import deque

from vote_aggregator.config.infrastructure_config import DEFAULT_PROGRAM_ID
from vote_aggregator.domain.errors import StaleStateError, SubjectNotFoundError
from vote_aggregator.domain.models.decision import AggregationDecision
from vote_aggregator.domain.models.ledger_subject import (
    LedgerSubject,
    LedgerSubjectState,
    LedgerTransition,
    TransactionReceipt,
)
from vote_aggregator.infrastructure.adapters.ledger.address import (
    derive_market_address,
    generate_signature,
)


class LedgerClientStub:
    """In-memory ledger.

    Attributes:
        submissions: Confirmed (subject_id, transition) pairs, in order.
        submit_attempts: Number of submit_transition calls.
    """

    def __init__(
        self,
        program_id: str = DEFAULT_PROGRAM_ID,
        default_state: LedgerSubjectState | None = None,
        submit_delay: float = 0.0,
    ) -> None:
        """Initialize the stub.

        Args:
            program_id: Program id used for address derivation.
            default_state: State reported for unknown subjects. None means
                unknown subjects raise SubjectNotFoundError.
            submit_delay: Seconds each submission takes.
        """
        self._program_id = program_id
        self._default_state = default_state
        self._submit_delay = submit_delay
        self._states: dict[str, LedgerSubjectState] = {}
        self._submit_errors: deque[Exception] = deque()
        self._fetch_errors: deque[Exception] = deque()
        self._races: dict[str, LedgerSubjectState] = {}
        self.submissions: list[tuple[str, LedgerTransition]] = []
        self.submit_attempts = 0

    def set_state(self, subject_id: str, state: LedgerSubjectState) -> None:
        self._states[subject_id] = state

    def get_state(self, subject_id: str) -> LedgerSubjectState | None:
        return self._states.get(subject_id, self._default_state)

    def fail_submissions(self, *errors: Exception) -> None:
        """Queue errors raised by the next submissions, one per call."""
        self._submit_errors.extend(errors)

    def fail_fetches(self, *errors: Exception) -> None:
        """Queue errors raised by the next state reads, one per call."""
        self._fetch_errors.extend(errors)

    def schedule_race(self, subject_id: str, state: LedgerSubjectState) -> None:
        """Another submitter moves the subject to `state` just before our next submission."""
        self._races[subject_id] = state

    def _current(self, subject_id: str) -> LedgerSubjectState:
        state = self.get_state(subject_id)
        if state is None:
            raise SubjectNotFoundError(subject_id)
        return state

    async def fetch_state(self, subject_id: str) -> LedgerSubject:
        if self._fetch_errors:
            raise self._fetch_errors.popleft()
        return LedgerSubject(address=subject_id, state=self._current(subject_id))

    async def submit_transition(
        self,
        subject_id: str,
        decision: AggregationDecision,
    ) -> TransactionReceipt:
        self.submit_attempts += 1
        if self._submit_delay:
            await asyncio.sleep(self._submit_delay)
        if self._submit_errors:
            raise self._submit_errors.popleft()
        if subject_id in self._races:
            self._states[subject_id] = self._races.pop(subject_id)

        transition = decision.transition
        state = self._current(subject_id)
        if state is not transition.source_state:
            raise StaleStateError(
                f"Subject {subject_id} is {state.value}, "
                f"{transition.value} requires {transition.source_state.value}",
                subject_id=subject_id,
                observed_state=state.value,
            )

        self._states[subject_id] = transition.target_state
        self.submissions.append((subject_id, transition))
        return TransactionReceipt(
            signature=generate_signature(
                subject_id, transition.value, str(len(self.submissions))
            ),
            subject_id=subject_id,
            transition=transition,
        )

    def derive_subject_address(self, market_key: str) -> str:
        return derive_market_address(market_key, self._program_id)
