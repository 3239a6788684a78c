"""Unit tests for the decision policy and ledger transition mapping."""

import pytest

from tests.helpers import address
from vote_aggregator.domain.models.decision import (
    AggregationOutcome,
    EvaluationStatus,
    SubjectEvaluation,
    NoActionReason,
)
from vote_aggregator.domain.models.ledger_subject import (
    LedgerSubject,
    LedgerSubjectState,
    LedgerTransition,
)
from vote_aggregator.domain.models.vote import SubjectRef, SubjectType, Tally
from vote_aggregator.domain.services.decision_policy import decide, meets_threshold

SUBJECT = address(1)


def _decide(
    approve: float,
    reject: float,
    voters: int,
    subject_type: SubjectType = SubjectType.PROPOSAL,
    threshold: float = 0.7,
    quorum: int = 10,
):
    return decide(
        subject_type=subject_type,
        subject_id=SUBJECT,
        tally=Tally(approve_weight=approve, reject_weight=reject, total_voters=voters),
        threshold=threshold,
        min_votes_required=quorum,
    )


class TestDecide:
    def test_seven_of_ten_approves_proposal(self) -> None:
        decision = _decide(7, 3, 10)
        assert decision.outcome is AggregationOutcome.APPROVED
        assert decision.transition is LedgerTransition.APPROVE

    def test_six_of_ten_rejects_proposal(self) -> None:
        decision = _decide(6, 4, 10)
        assert decision.outcome is AggregationOutcome.REJECTED
        assert decision.transition is LedgerTransition.REJECT

    def test_below_quorum(self) -> None:
        decision = _decide(9, 0, 9)
        assert decision.outcome is AggregationOutcome.INSUFFICIENT_QUORUM
        assert not decision.requires_submission
        with pytest.raises(ValueError):
            _ = decision.transition

    def test_dispute_uses_resolve_and_dismiss(self) -> None:
        upheld = _decide(6, 4, 10, SubjectType.DISPUTE, threshold=0.6)
        dismissed = _decide(5, 5, 10, SubjectType.DISPUTE, threshold=0.6)
        assert upheld.transition is LedgerTransition.RESOLVE
        assert dismissed.transition is LedgerTransition.DISMISS

    def test_decision_records_tally(self) -> None:
        decision = _decide(7, 3, 10)
        assert decision.to_dict()["approve_weight"] == 7
        assert decision.to_dict()["threshold"] == 0.7


class TestMeetsThreshold:
    def test_tie_at_threshold_meets_it(self) -> None:
        assert meets_threshold(Tally(7, 3, 10), 0.7)

    def test_float_rounding_at_threshold(self) -> None:
        # 0.1 * 7 accumulates rounding error
        assert meets_threshold(Tally(0.1 * 7, 0.3, 10), 0.7)

    def test_zero_weight_never_meets(self) -> None:
        assert not meets_threshold(Tally(0, 0, 0), 0.01)


class TestLedgerSubject:
    def test_transition_table(self) -> None:
        assert LedgerTransition.APPROVE.source_state is LedgerSubjectState.PROPOSED
        assert LedgerTransition.REJECT.target_state is LedgerSubjectState.CANCELLED
        assert LedgerTransition.RESOLVE.source_state is LedgerSubjectState.DISPUTED
        assert LedgerTransition.DISMISS.target_state is LedgerSubjectState.FINALIZED

    def test_proposal_eligibility(self) -> None:
        proposed = LedgerSubject(SUBJECT, LedgerSubjectState.PROPOSED)
        approved = LedgerSubject(SUBJECT, LedgerSubjectState.APPROVED)
        assert proposed.accepts(SubjectType.PROPOSAL)
        assert not approved.accepts(SubjectType.PROPOSAL)
        assert approved.is_settled_for(SubjectType.PROPOSAL)

    def test_dispute_waits_for_disputed_state(self) -> None:
        active = LedgerSubject(SUBJECT, LedgerSubjectState.ACTIVE)
        assert not active.accepts(SubjectType.DISPUTE)
        assert not active.is_settled_for(SubjectType.DISPUTE)


class TestSubjectEvaluation:
    def test_no_action(self) -> None:
        ref = SubjectRef(SubjectType.PROPOSAL, SUBJECT)
        evaluation = SubjectEvaluation.no_action(ref, NoActionReason.LOCK_HELD)
        assert evaluation.status is EvaluationStatus.NO_ACTION
        assert evaluation.to_dict()["reason"] == "LOCK_HELD"

    def test_failed(self) -> None:
        ref = SubjectRef(SubjectType.DISPUTE, SUBJECT)
        evaluation = SubjectEvaluation.failed(ref, "boom", attempts=3)
        assert evaluation.status.is_failure
        assert not evaluation.status.progressed
        assert evaluation.to_dict()["attempts"] == 3
