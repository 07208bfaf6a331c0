"""Light targets read and written by the Light On/Off engine."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Protocol

from homeassistant.components.light import (
    ATTR_BRIGHTNESS,
    ATTR_RGB_COLOR,
    ATTR_SUPPORTED_COLOR_MODES,
    brightness_supported,
    color_supported,
)
from homeassistant.components.light.const import DOMAIN as LIGHT_DOMAIN
from homeassistant.const import (
    ATTR_ENTITY_ID,
    SERVICE_TURN_OFF,
    SERVICE_TURN_ON,
    STATE_ON,
    STATE_UNAVAILABLE,
)
from homeassistant.core import HomeAssistant, State, callback
from homeassistant.exceptions import HomeAssistantError

from .models import LIGHT_OFF, WHITE, LightValue

_LOGGER = logging.getLogger(__name__)


class LightTarget(Protocol):
    """Anything whose color and intensity the engine can drive."""

    def current_value(self) -> LightValue:
        """Return the current color and intensity."""

    def set_value(self, value: LightValue) -> None:
        """Apply a color and intensity."""


# =============================================================================
# Home Assistant light entities
# =============================================================================


def is_scriptable(state: State | None) -> bool:
    """Check if a light entity can be driven by the engine.

    The entity must exist, be available and support brightness (on/off only
    lights can't be faded).
    """
    if state is None or state.state == STATE_UNAVAILABLE:
        return False
    return brightness_supported(state.attributes.get(ATTR_SUPPORTED_COLOR_MODES))


def value_from_state(state: State | None) -> LightValue:
    """Convert a light state into a LightValue."""
    if state is None or state.state != STATE_ON:
        return LIGHT_OFF

    brightness = state.attributes.get(ATTR_BRIGHTNESS)
    intensity = brightness / 255 if brightness is not None else 1.0

    # On without a reported color reads as white
    rgb = state.attributes.get(ATTR_RGB_COLOR)
    color = (rgb[0] / 255, rgb[1] / 255, rgb[2] / 255) if rgb else WHITE

    return LightValue(color=color, intensity=intensity)


def _to_byte(value: float) -> int:
    """Scale a 0.0-1.0 value to 0-255."""
    return min(max(round(value * 255), 0), 255)


class EntityLightTarget:
    """A light entity driven through the light.turn_on/turn_off services.

    Writes are fire-and-forget service calls, so the entity state lags
    behind. While a write is in flight current_value() returns the value
    being written; otherwise it reads the entity state, so changes made
    outside the engine are picked up by the next fade.
    """

    def __init__(self, hass: HomeAssistant, entity_id: str, *, supports_color: bool) -> None:
        self.hass = hass
        self.entity_id = entity_id
        self.supports_color = supports_color
        self._last_written: LightValue | None = None
        self._pending_writes = 0

    def __repr__(self) -> str:
        return f"EntityLightTarget({self.entity_id!r})"

    @property
    def write_pending(self) -> bool:
        """True while a service call from set_value() has not finished."""
        return self._pending_writes > 0

    @callback
    def current_value(self) -> LightValue:
        """Return the value being written, or the entity state when idle."""
        if self.write_pending and self._last_written is not None:
            return self._last_written
        return value_from_state(self.hass.states.get(self.entity_id))

    @callback
    def set_value(self, value: LightValue) -> None:
        """Schedule a service call applying *value* to the light.

        Writes to a light that has gone away are ignored.
        """
        state = self.hass.states.get(self.entity_id)
        if state is None or state.state == STATE_UNAVAILABLE:
            _LOGGER.debug("%s: Light unavailable, ignoring write", self.entity_id)
            return

        self._last_written = value
        self._pending_writes += 1
        self.hass.async_create_task(self._async_apply(value))

    async def _async_apply(self, value: LightValue) -> None:
        """Call the light service for *value*."""
        try:
            if value.intensity <= 0:
                await self.hass.services.async_call(
                    LIGHT_DOMAIN,
                    SERVICE_TURN_OFF,
                    {ATTR_ENTITY_ID: self.entity_id},
                    blocking=True,
                )
                return

            # Anything above zero intensity must stay on
            service_data: dict = {
                ATTR_ENTITY_ID: self.entity_id,
                ATTR_BRIGHTNESS: max(_to_byte(value.intensity), 1),
            }
            if self.supports_color:
                service_data[ATTR_RGB_COLOR] = tuple(_to_byte(c) for c in value.color)

            await self.hass.services.async_call(
                LIGHT_DOMAIN,
                SERVICE_TURN_ON,
                service_data,
                blocking=True,
            )
        except HomeAssistantError as err:
            _LOGGER.debug("%s: Ignoring failed write: %s", self.entity_id, err)
        finally:
            self._pending_writes -= 1


@callback
def async_get_light_targets(
    hass: HomeAssistant, entity_ids: Iterable[str]
) -> list[EntityLightTarget]:
    """Return targets for the scriptable lights among *entity_ids*, in order."""
    targets: list[EntityLightTarget] = []
    for entity_id in dict.fromkeys(entity_ids):
        state = hass.states.get(entity_id)
        if not is_scriptable(state):
            _LOGGER.debug("%s: Skipping - not a dimmable light", entity_id)
            continue
        assert state is not None  # checked by is_scriptable
        targets.append(
            EntityLightTarget(
                hass,
                entity_id,
                supports_color=color_supported(state.attributes.get(ATTR_SUPPORTED_COLOR_MODES)),
            )
        )
    return targets


# =============================================================================
# Target set
# =============================================================================


class LightTargets:
    """The ordered set of targets driven together.

    Samples are taken from the first target. Every target receives the
    same value on each write.
    """

    def __init__(self, targets: Iterable[LightTarget]) -> None:
        self._targets = list(targets)

    def __len__(self) -> int:
        return len(self._targets)

    def __iter__(self) -> Iterator[LightTarget]:
        return iter(self._targets)

    def sample(self) -> LightValue:
        """Return the current value of the first target."""
        return self._targets[0].current_value()

    def apply(self, value: LightValue) -> None:
        """Write *value* to every target."""
        for target in self._targets:
            target.set_value(value)
