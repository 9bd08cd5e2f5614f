"""Testes do rastreador de transições."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from ivr_navigator.domain.session import CallSession
from ivr_navigator.domain.states import CallFlowState
from ivr_navigator.domain.transitions import TransitionTracker, is_legal_transition

S = CallFlowState


@pytest.fixture
def session() -> CallSession:
    return CallSession(call_id="IvrNav_test0001")


@pytest.fixture
def tracker() -> TransitionTracker:
    return TransitionTracker()


class TestIsLegalTransition:
    def test_declared_successor_is_legal(self) -> None:
        assert is_legal_transition(S.MAIN_MENU, S.PHARMACY_HOURS)

    def test_undeclared_successor_is_illegal(self) -> None:
        assert not is_legal_transition(S.WEEKLY_HOURS, S.CONFIRM_RX)

    def test_unknown_source_accepts_anything(self) -> None:
        for target in S:
            assert is_legal_transition(S.UNKNOWN, target)


class TestTransitionTracker:
    """record() avança a sessão; ilegal é sinal, não bloqueio."""

    def test_first_transition_from_unknown(self, session, tracker) -> None:
        assert tracker.record(session, S.MAIN_MENU) == S.MAIN_MENU
        assert session.current == S.MAIN_MENU
        assert session.previous == S.UNKNOWN
        assert session.history == [S.MAIN_MENU]
        assert S.MAIN_MENU in session.discovered_states
        # UNKNOWN como origem não entra na contagem
        assert sum(session.transitions.values()) == 0

    def test_legal_transition_is_counted(self, session, tracker) -> None:
        tracker.record(session, S.MAIN_MENU)
        tracker.record(session, S.PHARMACY_HOURS)

        assert session.transitions[(S.MAIN_MENU, S.PHARMACY_HOURS)] == 1
        assert session.history == [S.MAIN_MENU, S.PHARMACY_HOURS]
        assert session.illegal_transitions == []

    def test_self_loop_is_noop(self, session, tracker) -> None:
        tracker.record(session, S.MAIN_MENU)
        assert tracker.record(session, S.MAIN_MENU) == S.MAIN_MENU

        assert session.history == [S.MAIN_MENU]
        assert session.previous == S.UNKNOWN
        assert (S.MAIN_MENU, S.MAIN_MENU) not in session.transitions

    def test_self_loop_still_marks_state_observed(self, session, tracker) -> None:
        tracker.record(session, S.UNKNOWN)
        assert session.history == []
        assert S.UNKNOWN in session.discovered_states

    def test_illegal_transition_still_advances(self, session, tracker) -> None:
        session.current = S.WEEKLY_HOURS

        with patch("ivr_navigator.domain.transitions.logger") as mock_logger:
            state = tracker.record(session, S.CONFIRM_RX)

        assert state == S.CONFIRM_RX
        assert session.current == S.CONFIRM_RX
        assert session.previous == S.WEEKLY_HOURS
        assert session.history[-1] == S.CONFIRM_RX
        assert session.illegal_transitions == [(S.WEEKLY_HOURS, S.CONFIRM_RX)]
        assert session.transitions[(S.WEEKLY_HOURS, S.CONFIRM_RX)] == 1
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args[0] == "illegal_state_transition"

    def test_transition_to_unknown_is_recorded(self, session, tracker) -> None:
        tracker.record(session, S.MAIN_MENU)
        tracker.record(session, S.UNKNOWN)

        assert session.current == S.UNKNOWN
        assert session.transitions[(S.MAIN_MENU, S.UNKNOWN)] == 1
        assert session.illegal_transitions == [(S.MAIN_MENU, S.UNKNOWN)]

    def test_repeated_transitions_accumulate(self, session, tracker) -> None:
        for _ in range(3):
            tracker.record(session, S.MAIN_MENU)
            tracker.record(session, S.PHARMACY_HOURS)

        assert session.transitions[(S.MAIN_MENU, S.PHARMACY_HOURS)] == 3
        assert session.transitions[(S.PHARMACY_HOURS, S.MAIN_MENU)] == 2
