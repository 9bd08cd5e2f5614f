"""Testes para o helper de latência."""

from __future__ import annotations

import time
from unittest.mock import patch

import pytest

from ivr_navigator.observability.timing import timed


class TestTimedContextManager:
    """timed() mede e loga `component_latency`."""

    def test_measures_elapsed_time(self):
        with patch("ivr_navigator.observability.timing.logger") as mock_logger:
            with timed("navigation_step"):
                time.sleep(0.01)

            mock_logger.info.assert_called_once()
            extra = mock_logger.info.call_args.kwargs["extra"]
            assert extra["component"] == "navigation_step"
            assert extra["elapsed_ms"] >= 10.0

    def test_extra_fields_are_attached(self):
        with patch("ivr_navigator.observability.timing.logger") as mock_logger:
            with timed("navigation_step", step=3, state="main_menu"):
                pass

            extra = mock_logger.info.call_args.kwargs["extra"]
            assert extra["step"] == 3
            assert extra["state"] == "main_menu"

    def test_logs_on_exception(self):
        with patch("ivr_navigator.observability.timing.logger") as mock_logger:
            with pytest.raises(ValueError):
                with timed("error_component"):
                    raise ValueError("test error")

            mock_logger.info.assert_called_once()
