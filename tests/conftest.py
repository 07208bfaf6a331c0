"""Fixtures for Light On/Off integration tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import timedelta
from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.components.light import (
    ATTR_BRIGHTNESS,
    ATTR_RGB_COLOR,
    ATTR_SUPPORTED_COLOR_MODES,
    ColorMode,
)
from homeassistant.const import ATTR_ENTITY_ID, CONF_NAME, STATE_OFF, STATE_ON
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.util import dt as dt_util
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.light_on_off.const import CONF_LIGHTS, DOMAIN

COLOR_LIGHT = "light.color_lamp"
DIMMABLE_LIGHT = "light.dimmable_lamp"


class TickDriver:
    """Stand-in for async_track_time_interval that lets tests fire ticks by hand."""

    def __init__(self) -> None:
        self.intervals: list[timedelta] = []
        self.last_action: Callable[[Any], None] | None = None
        self._active: list[Callable[[Any], None]] = []

    @property
    def running(self) -> bool:
        """True while a tracked interval has not been removed."""
        return bool(self._active)

    @property
    def start_count(self) -> int:
        """How many times an interval was tracked."""
        return len(self.intervals)

    def track(
        self, _hass: HomeAssistant, action: Callable[[Any], None], interval: timedelta, **_kwargs
    ) -> Callable[[], None]:
        self.intervals.append(interval)
        self.last_action = action
        self._active.append(action)

        def _remove() -> None:
            self._active.remove(action)

        return _remove

    def tick(self, count: int = 1) -> None:
        """Deliver *count* ticks to every running interval."""
        for _ in range(count):
            for action in list(self._active):
                action(dt_util.utcnow())


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(
    enable_custom_integrations: None,
) -> Generator[None]:
    """Enable custom integrations for all tests."""
    yield


@pytest.fixture(autouse=True)
def tick_driver() -> Generator[TickDriver]:
    """Replace the real fade timer so ticks are driven by the test."""
    driver = TickDriver()
    with patch(
        "custom_components.light_on_off.engine.async_track_time_interval",
        side_effect=driver.track,
    ):
        yield driver


@pytest.fixture
def color_light(hass: HomeAssistant) -> str:
    """Create an RGB light that is on at brightness 200, orange."""
    hass.states.async_set(
        COLOR_LIGHT,
        STATE_ON,
        {
            ATTR_BRIGHTNESS: 200,
            ATTR_RGB_COLOR: (255, 128, 0),
            ATTR_SUPPORTED_COLOR_MODES: [ColorMode.RGB],
        },
    )
    return COLOR_LIGHT


@pytest.fixture
def dimmable_light(hass: HomeAssistant) -> str:
    """Create a brightness-only light that is on at brightness 100."""
    hass.states.async_set(
        DIMMABLE_LIGHT,
        STATE_ON,
        {
            ATTR_BRIGHTNESS: 100,
            ATTR_SUPPORTED_COLOR_MODES: [ColorMode.BRIGHTNESS],
        },
    )
    return DIMMABLE_LIGHT


@pytest.fixture
def entry_options() -> dict[str, Any]:
    """Options for the mock config entry; override per test module."""
    return {}


@pytest.fixture
def mock_config_entry(color_light: str, entry_options: dict[str, Any]) -> MockConfigEntry:
    """Create a mock config entry driving the color light."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="Lamp",
        data={CONF_NAME: "Lamp", CONF_LIGHTS: [color_light]},
        options=entry_options,
    )


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    captured_calls: list[ServiceCall],
) -> MockConfigEntry:
    """Set up the Light On/Off integration for testing."""
    mock_config_entry.add_to_hass(hass)

    await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    return mock_config_entry


@pytest.fixture
def captured_calls(hass: HomeAssistant) -> list[ServiceCall]:
    """Capture light service calls for verification."""
    calls: list[ServiceCall] = []

    async def mock_service_handler(call: ServiceCall) -> None:
        """Record the service call and update light state."""
        calls.append(call)

        entity_id = call.data.get(ATTR_ENTITY_ID)
        if entity_id:
            entity_ids = entity_id if isinstance(entity_id, list) else [entity_id]
            for eid in entity_ids:
                current_state = hass.states.get(eid)
                if current_state:
                    current_attrs = dict(current_state.attributes)

                    if call.service == "turn_on":
                        new_state = STATE_ON
                        if ATTR_BRIGHTNESS in call.data:
                            current_attrs[ATTR_BRIGHTNESS] = call.data[ATTR_BRIGHTNESS]
                        if ATTR_RGB_COLOR in call.data:
                            current_attrs[ATTR_RGB_COLOR] = call.data[ATTR_RGB_COLOR]
                    elif call.service == "turn_off":
                        new_state = STATE_OFF
                        current_attrs[ATTR_BRIGHTNESS] = None
                    else:
                        new_state = current_state.state

                    hass.states.async_set(eid, new_state, current_attrs)

    hass.services.async_register("light", "turn_on", mock_service_handler)
    hass.services.async_register("light", "turn_off", mock_service_handler)

    return calls
