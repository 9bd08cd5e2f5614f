"""Testes da montagem de drivers e da execução concorrente."""

from __future__ import annotations

import time

import pytest

from ivr_navigator.application.navigation import (
    NavigationConfig,
    build_driver,
    create_driver,
    run_concurrently,
)
from ivr_navigator.config.settings import Settings
from ivr_navigator.domain.actions import TraversalMode
from ivr_navigator.domain.states import CallFlowState
from tests.helpers.fake_endpoint import FakeCallEndpoint

MENU_PROMPT = "Welcome... press 1 to refill, press 2 to check status"
HOURS_PROMPT = "Today we're open until 9 PM. Press 1 for our weekly hours."
REFILL_PROMPT = "Please enter the prescription number you would like to refill."
CONFIRM_PROMPT = "You entered 0 0 0 1 2 3 4. Press 1 to confirm."
ZERO_DELAYS = {
    "inter_leg_delay_seconds": 0,
    "blank_recovery_delay_seconds": 0,
    "step_delay_seconds": 0,
}


class TestNavigationConfig:
    def test_from_settings(self) -> None:
        config = NavigationConfig.from_settings(Settings(max_steps=9))
        assert config.mode == TraversalMode.SCRIPTED
        assert config.max_steps == 9
        assert config.step_delay == 2.0

    def test_overrides(self) -> None:
        config = NavigationConfig.from_settings(Settings(), mode="exploratory", max_steps=3)
        assert config.mode == TraversalMode.EXPLORATORY
        assert config.max_steps == 3


class TestBuildDriver:
    def test_label_in_call_id(self) -> None:
        config = NavigationConfig.from_settings(Settings())
        driver = build_driver(config, FakeCallEndpoint(), label="c1")

        assert driver.session.call_id.startswith("IvrNav_c1_")

    def test_each_driver_has_own_session(self) -> None:
        config = NavigationConfig.from_settings(Settings())
        first = build_driver(config, FakeCallEndpoint())
        second = build_driver(config, FakeCallEndpoint())

        assert first.session is not second.session
        assert first.session.call_id != second.session.call_id

    def test_assisted_requires_enabled_advisor(self) -> None:
        with pytest.raises(ValueError):
            create_driver(Settings(), mode="assisted")


class TestRunConcurrently:
    """Sessões concorrentes não compartilham estado."""

    @pytest.mark.asyncio
    async def test_independent_sessions(self) -> None:
        config = NavigationConfig.from_settings(Settings(**ZERO_DELAYS))
        endpoints = [
            FakeCallEndpoint(start_prompt=MENU_PROMPT, default_response=HOURS_PROMPT),
            FakeCallEndpoint(start_prompt=HOURS_PROMPT, default_response=MENU_PROMPT),
        ]
        drivers = [build_driver(config, endpoint) for endpoint in endpoints]

        results = await run_concurrently(drivers, max_steps=1)

        assert [r.call_id for r in results] == [d.session.call_id for d in drivers]
        assert results[0].final_state == CallFlowState.PHARMACY_HOURS
        assert results[1].final_state == CallFlowState.MAIN_MENU
        assert all(endpoint.ended for endpoint in endpoints)
        assert endpoints[0].legs == [("start", ""), ("input", "4")]
        assert endpoints[1].legs == [("start", ""), ("input", "1")]

    @pytest.mark.asyncio
    async def test_inter_leg_delays_overlap_across_sessions(self) -> None:
        delay = 0.3
        config = NavigationConfig.from_settings(
            Settings(**{**ZERO_DELAYS, "inter_leg_delay_seconds": delay})
        )
        endpoints = [
            FakeCallEndpoint(start_prompt=REFILL_PROMPT, default_response=CONFIRM_PROMPT)
            for _ in range(3)
        ]
        drivers = [build_driver(config, endpoint) for endpoint in endpoints]

        started = time.perf_counter()
        await run_concurrently(drivers, max_steps=1)
        elapsed = time.perf_counter() - started

        assert delay <= elapsed < delay * 2
        for endpoint in endpoints:
            assert endpoint.legs == [("start", ""), ("input", "0"), ("input", "001234")]
