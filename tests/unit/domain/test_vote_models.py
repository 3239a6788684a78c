"""Unit tests for vote domain models."""

from datetime import datetime, timezone

import pytest

from tests.helpers import address
from vote_aggregator.domain.errors import InvalidSubjectIdError, InvalidVoteError
from vote_aggregator.domain.models.vote import (
    SubjectRef,
    SubjectType,
    Tally,
    Vote,
    generate_vote_id,
    is_ledger_address,
)

SUBJECT = address(1)
VOTER = address(2)


class TestSubjectType:
    def test_parse_is_case_insensitive(self) -> None:
        assert SubjectType.parse("PROPOSAL") is SubjectType.PROPOSAL
        assert SubjectType.parse("dispute") is SubjectType.DISPUTE

    def test_parse_passes_enum_through(self) -> None:
        assert SubjectType.parse(SubjectType.DISPUTE) is SubjectType.DISPUTE

    def test_parse_unknown_raises(self) -> None:
        with pytest.raises(InvalidVoteError) as exc_info:
            SubjectType.parse("referendum")
        assert exc_info.value.field == "subject_type"


class TestLedgerAddress:
    def test_accepts_base58(self) -> None:
        assert is_ledger_address(SUBJECT)

    @pytest.mark.parametrize(
        "value",
        ["", "short", "0" * 40, "O" * 40, "l" * 40, "I" * 40, "1" * 45],
    )
    def test_rejects_non_base58(self, value: str) -> None:
        assert not is_ledger_address(value)


class TestSubjectRef:
    def test_key_round_trip(self) -> None:
        ref = SubjectRef(SubjectType.DISPUTE, SUBJECT)
        assert ref.key == f"dispute:{SUBJECT}"
        assert SubjectRef.from_key(ref.key) == ref

    def test_from_key_rejects_malformed(self) -> None:
        with pytest.raises(ValueError):
            SubjectRef.from_key("proposal")

    def test_sorts_by_type_then_id(self) -> None:
        refs = [
            SubjectRef(SubjectType.PROPOSAL, address(5)),
            SubjectRef(SubjectType.DISPUTE, address(9)),
            SubjectRef(SubjectType.DISPUTE, address(3)),
        ]
        assert sorted(refs)[0].subject_type is SubjectType.DISPUTE


class TestVote:
    def test_default_weight_is_one(self) -> None:
        vote = Vote(SubjectType.PROPOSAL, SUBJECT, VOTER, choice=True)
        assert vote.weight == 1.0
        assert vote.cast_at.tzinfo is not None

    @pytest.mark.parametrize("weight", [0, -1.5, float("inf"), float("nan")])
    def test_rejects_bad_weight(self, weight: float) -> None:
        with pytest.raises(InvalidVoteError) as exc_info:
            Vote(SubjectType.PROPOSAL, SUBJECT, VOTER, choice=True, weight=weight)
        assert exc_info.value.field == "weight"

    def test_rejects_bool_weight(self) -> None:
        with pytest.raises(InvalidVoteError):
            Vote(SubjectType.PROPOSAL, SUBJECT, VOTER, choice=True, weight=True)

    def test_rejects_malformed_voter(self) -> None:
        with pytest.raises(InvalidSubjectIdError) as exc_info:
            Vote(SubjectType.PROPOSAL, SUBJECT, "not-an-address", choice=True)
        assert exc_info.value.field == "voter_id"

    def test_rejects_naive_timestamp(self) -> None:
        with pytest.raises(InvalidVoteError):
            Vote(
                SubjectType.PROPOSAL,
                SUBJECT,
                VOTER,
                choice=True,
                cast_at=datetime(2026, 1, 1),
            )

    def test_record_round_trip(self) -> None:
        vote = Vote(
            SubjectType.DISPUTE,
            SUBJECT,
            VOTER,
            choice=False,
            weight=2.5,
            cast_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
        )
        restored = Vote.from_record(
            SubjectType.DISPUTE, SUBJECT, VOTER, vote.to_record()
        )
        assert restored == vote

    def test_vote_id_is_stable_per_voter(self) -> None:
        first = Vote(SubjectType.PROPOSAL, SUBJECT, VOTER, choice=True)
        second = Vote(SubjectType.PROPOSAL, SUBJECT, VOTER, choice=False, weight=3)
        assert first.vote_id == second.vote_id
        assert first.vote_id.startswith("PV-")

    def test_vote_id_differs_between_voters(self) -> None:
        first = Vote(SubjectType.PROPOSAL, SUBJECT, address(10), choice=True)
        second = Vote(SubjectType.PROPOSAL, SUBJECT, address(11), choice=True)
        assert first.vote_id != second.vote_id

    def test_vote_id_differs_between_subjects(self) -> None:
        assert generate_vote_id(
            SubjectType.PROPOSAL, address(1), VOTER
        ) != generate_vote_id(SubjectType.PROPOSAL, address(3), VOTER)

    def test_vote_id_hash_length(self) -> None:
        vote_id = generate_vote_id(SubjectType.PROPOSAL, SUBJECT, VOTER)
        assert len(vote_id) == len("PV-") + 16

    def test_dispute_vote_id_prefix(self) -> None:
        assert generate_vote_id(SubjectType.DISPUTE, SUBJECT, VOTER).startswith("DV-")


class TestTally:
    def test_empty_tally(self) -> None:
        tally = Tally.from_votes([])
        assert tally.total_voters == 0
        assert tally.approval_ratio == 0.0

    def test_weighted_ratio(self) -> None:
        votes = [
            Vote(SubjectType.PROPOSAL, SUBJECT, address(10), choice=True, weight=3),
            Vote(SubjectType.PROPOSAL, SUBJECT, address(11), choice=False, weight=1),
        ]
        tally = Tally.from_votes(votes)
        assert tally.approve_weight == 3
        assert tally.reject_weight == 1
        assert tally.total_voters == 2
        assert tally.approval_ratio == pytest.approx(0.75)

    def test_to_dict_includes_ratio(self) -> None:
        tally = Tally(approve_weight=1, reject_weight=1, total_voters=2)
        assert tally.to_dict()["approval_ratio"] == pytest.approx(0.5)


class TestLastWriteWins:
    def test_tally_is_independent_of_arrival_order(self) -> None:
        ballots = [
            Vote(SubjectType.PROPOSAL, SUBJECT, address(10), choice=True, weight=2),
            Vote(SubjectType.PROPOSAL, SUBJECT, address(11), choice=False),
            Vote(SubjectType.PROPOSAL, SUBJECT, address(12), choice=True),
        ]

        forward = Tally.from_votes(ballots)
        backward = Tally.from_votes(reversed(ballots))

        assert forward == backward
