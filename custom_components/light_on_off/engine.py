"""Fade engine for the Light On/Off integration.

Event names from the config are subscribed on the Home Assistant event bus.
Turn on/off events start a fade which a periodic tick advances, writing the
interpolated color and intensity to every light.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from homeassistant.core import CALLBACK_TYPE, Event, HomeAssistant, callback
from homeassistant.helpers.event import async_track_time_interval
from homeassistant.helpers.start import async_at_started

from .const import TICK_INTERVAL_S
from .models import LIGHT_FULL_WHITE, LIGHT_OFF, FadeState, LightOnOffConfig, LightValue
from .targets import LightTargets, async_get_light_targets

_LOGGER = logging.getLogger(__name__)


# =============================================================================
# InterpolationScheduler
# =============================================================================


class InterpolationScheduler:
    """Periodic tick advancing a FadeState and writing the result.

    Once started the tick keeps running, idle between fades, until stop()
    is called.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        name: str,
        state: FadeState,
        targets: LightTargets,
        *,
        enabled: bool,
        tick_interval: float = TICK_INTERVAL_S,
    ) -> None:
        self.hass = hass
        self.name = name
        self.state = state
        self.targets = targets
        self.tick_interval = tick_interval
        # False when no fade time is configured: every change is instant
        self._enabled = enabled
        self._unsub_tick: CALLBACK_TYPE | None = None

    @property
    def running(self) -> bool:
        """True while the tick is scheduled."""
        return self._unsub_tick is not None

    @callback
    def start(self) -> None:
        """Start ticking. No-op if already running or no fade time is configured."""
        if self._unsub_tick is not None or not self._enabled:
            return

        self.state.reset(self.targets.sample())
        self._unsub_tick = async_track_time_interval(
            self.hass,
            self._async_tick,
            timedelta(seconds=self.tick_interval),
            name=f"{self.name} fade tick",
            cancel_on_shutdown=True,
        )
        _LOGGER.debug("%s: Fade tick started", self.name)

    @callback
    def stop(self) -> None:
        """Stop ticking. Safe to call when not running."""
        if self._unsub_tick is None:
            return
        self._unsub_tick()
        self._unsub_tick = None
        _LOGGER.debug("%s: Fade tick stopped", self.name)

    @callback
    def _async_tick(self, _now: datetime) -> None:
        if self._unsub_tick is None:
            # Stopped; a late delivery must not write anything
            return

        value = self.state.advance(self.tick_interval)
        if value is None:
            return

        self.targets.apply(value)
        if not self.state.active:
            _LOGGER.debug("%s: Fade complete", self.name)


# =============================================================================
# TriggerGate
# =============================================================================


class TriggerGate:
    """Enable/disable boundary around the turn on/off event subscriptions."""

    def __init__(
        self,
        hass: HomeAssistant,
        name: str,
        config: LightOnOffConfig,
        state: FadeState,
        targets: LightTargets,
        scheduler: InterpolationScheduler,
        initial_value: LightValue,
    ) -> None:
        self.hass = hass
        self.name = name
        self.config = config
        self.state = state
        self.targets = targets
        self.scheduler = scheduler
        self.initial_value = initial_value
        self._subscriptions: list[CALLBACK_TYPE] = []
        self._subscribed = False

    @property
    def enabled(self) -> bool:
        """True while the turn on/off events are subscribed."""
        return self._subscribed

    @callback
    def enable(self) -> None:
        """Subscribe to the turn on/off events and start the fade tick."""
        if not self._subscribed:
            self._subscriptions.extend(
                _listen_all(self.hass, self.config.turn_on_events, self._handle_turn_on)
            )
            self._subscriptions.extend(
                _listen_all(self.hass, self.config.turn_off_events, self._handle_turn_off)
            )
            self._subscribed = True
            _LOGGER.info("%s: Enabled", self.name)

        if self.config.has_fade_time:
            self.scheduler.start()

    @callback
    def disable(self) -> None:
        """Unsubscribe from the turn on/off events and stop the fade tick."""
        if self._subscribed:
            _LOGGER.info("%s: Disabled", self.name)

        while self._subscriptions:
            self._subscriptions.pop()()
        self._subscribed = False

        self.scheduler.stop()

    @callback
    def _handle_turn_on(self, event: Event) -> None:
        _LOGGER.debug("%s: Turn on (%s)", self.name, event.event_type)
        self._transition(self.initial_value, self.config.turn_on_fade_time)

    @callback
    def _handle_turn_off(self, event: Event) -> None:
        _LOGGER.debug("%s: Turn off (%s)", self.name, event.event_type)
        self._transition(LIGHT_OFF, self.config.turn_off_fade_time)

    @callback
    def _transition(self, target: LightValue, duration: float) -> None:
        """Fade to *target*, or set it immediately when *duration* is zero."""
        if self.state.active:
            _LOGGER.debug(
                "%s: Redirecting fade at %d%%", self.name, round(self.state.progress * 100)
            )

        if duration > 0:
            # Start from whatever is showing now, which may be mid-fade
            self.state.begin(self.targets.sample(), target, duration)
            return

        self.state.cancel()
        self.targets.apply(target)


def _listen_all(
    hass: HomeAssistant,
    event_types: Iterable[str],
    handler: Callable[[Event], None],
) -> list[CALLBACK_TYPE]:
    """Subscribe *handler* to every event in *event_types*."""
    return [hass.bus.async_listen(event_type, handler) for event_type in event_types]


# =============================================================================
# LightOnOffEngine
# =============================================================================


class LightOnOffEngine:
    """Per config entry engine driving a set of lights from bus events.

    Stored as ``hass.data[DOMAIN][entry_id]``.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        name: str,
        entity_ids: Iterable[str],
        config: LightOnOffConfig,
    ) -> None:
        self.hass = hass
        self.name = name
        self.entity_ids = list(entity_ids)
        self.config = config
        self.state = FadeState()
        self.targets: LightTargets | None = None
        self.scheduler: InterpolationScheduler | None = None
        self.gate: TriggerGate | None = None
        self.initial_value: LightValue | None = None
        self._unsub_start: CALLBACK_TYPE | None = None
        self._control_subscriptions: list[CALLBACK_TYPE] = []

    @property
    def inert(self) -> bool:
        """True if the engine never initialized (no usable lights)."""
        return self.gate is None

    @callback
    def async_setup(self) -> None:
        """Initialize once Home Assistant has started and light states exist."""
        self._unsub_start = async_at_started(self.hass, self._async_hass_started)

    @callback
    def _async_hass_started(self, _hass: HomeAssistant) -> None:
        self._unsub_start = None
        self.async_initialize()

    @callback
    def async_initialize(self) -> None:
        """Discover lights, record the on value and wire up events.

        Without any usable light the engine logs an error and stays inert.
        """
        targets = LightTargets(async_get_light_targets(self.hass, self.entity_ids))
        if not targets:
            _LOGGER.error(
                "%s: At least one dimmable light is required, none found in %s",
                self.name,
                self.entity_ids,
            )
            return

        self.targets = targets
        self.initial_value = targets.sample()
        if self.initial_value.intensity <= 0:
            # Nothing to record from a light that is off
            _LOGGER.debug("%s: First light is off, using full white as the on value", self.name)
            self.initial_value = LIGHT_FULL_WHITE
        self.state.reset(self.initial_value)

        self.scheduler = InterpolationScheduler(
            self.hass,
            self.name,
            self.state,
            targets,
            enabled=self.config.has_fade_time,
        )
        self.gate = TriggerGate(
            self.hass,
            self.name,
            self.config,
            self.state,
            targets,
            self.scheduler,
            self.initial_value,
        )

        _LOGGER.info(
            "%s: Driving %s light(s), on value %s", self.name, len(targets), self.initial_value
        )

        if self.config.turn_off_at_start:
            targets.apply(LIGHT_OFF)

        if self.config.start_enabled:
            self.gate.enable()

        self._control_subscriptions.extend(
            _listen_all(self.hass, self.config.enable_events, self._handle_enable)
        )
        self._control_subscriptions.extend(
            _listen_all(self.hass, self.config.disable_events, self._handle_disable)
        )

    @callback
    def _handle_enable(self, _event: Event) -> None:
        assert self.gate is not None
        self.gate.enable()

    @callback
    def _handle_disable(self, _event: Event) -> None:
        assert self.gate is not None
        self.gate.disable()

    @callback
    def async_shutdown(self) -> None:
        """Tear down all subscriptions and stop the fade tick."""
        if self._unsub_start is not None:
            self._unsub_start()
            self._unsub_start = None

        while self._control_subscriptions:
            self._control_subscriptions.pop()()

        if self.gate is not None:
            self.gate.disable()
