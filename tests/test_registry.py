"""Tests for participant registration and round accounting."""

import pytest

from symposium.coordinator.registry import ParticipantRegistry
from symposium.coordinator.session import Session
from symposium.lib.exceptions import RoundLimitExceededError


@pytest.fixture
def session():
    return Session(topic="X", key="X")


@pytest.fixture
def registry():
    return ParticipantRegistry(max_rounds=3)


class TestJoinOrGet:
    def test_new_participant_starts_at_round_one(self, registry, session):
        participant, is_new = registry.join_or_get(
            session, "A", metadata={"era": "modern"}, connection_key="c1"
        )

        assert is_new is True
        assert participant.rounds_completed == 1
        assert participant.session_id == session.session_id
        assert participant.metadata == {"era": "modern"}
        assert session.participants == {"A": participant}

    def test_existing_participant_returned_unchanged(self, registry, session):
        first, _ = registry.join_or_get(session, "A", metadata={"v": 1})
        again, is_new = registry.join_or_get(session, "A", metadata={"v": 2})

        assert is_new is False
        assert again is first
        assert again.metadata == {"v": 1}
        assert session.participant_count == 1

    def test_rejoin_moves_participant_to_new_connection(self, registry, session):
        first, _ = registry.join_or_get(session, "A", connection_key="c1")
        again, is_new = registry.join_or_get(session, "A", connection_key="c2")

        assert is_new is False
        assert again is first
        assert again.rounds_completed == 1
        assert registry.find_by_connection(session, "c2") is first
        assert registry.find_by_connection(session, "c1") is None

    def test_find(self, registry, session):
        participant, _ = registry.join_or_get(session, "A", connection_key="c1")

        assert registry.find(session, "A") is participant
        assert registry.find(session, "B") is None
        assert registry.find_by_connection(session, "c1") is participant
        assert registry.find_by_connection(session, "c2") is None


class TestAdvanceRound:
    def test_rounds_advance_to_maximum(self, registry, session):
        participant, _ = registry.join_or_get(session, "A")

        assert registry.advance_round(participant) == 2
        assert registry.rounds_remaining(participant) == 1
        assert registry.advance_round(participant) == 3
        assert registry.rounds_remaining(participant) == 0

    def test_round_limit_leaves_counter_unchanged(self, registry, session):
        participant, _ = registry.join_or_get(session, "A")
        registry.advance_round(participant)
        registry.advance_round(participant)

        with pytest.raises(RoundLimitExceededError) as exc_info:
            registry.advance_round(participant)

        assert exc_info.value.max_rounds == 3
        assert exc_info.value.rounds_remaining == 0
        assert participant.rounds_completed == 3

    def test_single_round_deployment(self, session):
        registry = ParticipantRegistry(max_rounds=1)
        participant, _ = registry.join_or_get(session, "A")

        with pytest.raises(RoundLimitExceededError):
            registry.advance_round(participant)
