"""Data models for the Light On/Off integration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .const import (
    CONF_DISABLE_EVENT,
    CONF_ENABLE_EVENT,
    CONF_START_ENABLED,
    CONF_TURN_OFF_AT_START,
    CONF_TURN_OFF_EVENT,
    CONF_TURN_OFF_FADE_TIME,
    CONF_TURN_ON_EVENT,
    CONF_TURN_ON_FADE_TIME,
    DEFAULT_DISABLE_EVENT,
    DEFAULT_ENABLE_EVENT,
    DEFAULT_FADE_TIME,
    DEFAULT_START_ENABLED,
    DEFAULT_TURN_OFF_AT_START,
    DEFAULT_TURN_OFF_EVENT,
    DEFAULT_TURN_ON_EVENT,
    EVENT_NAME_SEPARATOR,
    MAX_FADE_TIME,
    MIN_FADE_TIME,
    REMAINING_EPSILON,
)

# (red, green, blue), each 0.0-1.0
RGB = tuple[float, float, float]


@dataclass(frozen=True)
class LightValue:
    """Color and intensity of a light, both normalized to 0.0-1.0."""

    color: RGB = (0.0, 0.0, 0.0)
    intensity: float = 0.0

    def blend(self, other: LightValue, t: float) -> LightValue:
        """Return ``self * t + other * (1 - t)`` component-wise.

        ``t=1`` yields this value exactly and ``t=0`` yields ``other`` exactly.
        """
        color = tuple(a * t + b * (1.0 - t) for a, b in zip(self.color, other.color, strict=True))
        return LightValue(
            color=color,  # type: ignore[arg-type]
            intensity=self.intensity * t + other.intensity * (1.0 - t),
        )


# Black at zero intensity
LIGHT_OFF = LightValue()

WHITE: RGB = (1.0, 1.0, 1.0)

# On value used when the first light is not on at start-up
LIGHT_FULL_WHITE = LightValue(color=WHITE, intensity=1.0)


@dataclass
class FadeState:
    """In-flight interpolation parameters.

    Attributes:
        previous: Value at the start of the current fade.
        target: Value the fade ends on.
        remaining: Seconds left in the fade, 0 <= remaining <= total.
        total: Full duration of the fade in seconds. Zero means no fade.
        active: True while remaining > 0.
    """

    previous: LightValue = field(default=LIGHT_OFF)
    target: LightValue = field(default=LIGHT_OFF)
    remaining: float = 0.0
    total: float = 0.0
    active: bool = False

    def reset(self, value: LightValue) -> None:
        """Go idle, parked on *value*."""
        self.previous = value
        self.target = value
        self.remaining = 0.0
        self.total = 0.0
        self.active = False

    def begin(self, previous: LightValue, target: LightValue, duration: float) -> None:
        """Start (or redirect) a fade from *previous* to *target* over *duration* seconds."""
        if duration <= 0:
            raise ValueError(f"Fade duration must be positive, got {duration}")
        self.previous = previous
        self.target = target
        self.total = duration
        self.remaining = duration
        self.active = True

    def cancel(self) -> None:
        """Stop the current fade without touching previous/target."""
        self.remaining = 0.0
        self.active = False

    def advance(self, elapsed: float) -> LightValue | None:
        """Advance the fade by *elapsed* seconds.

        Returns the interpolated value to write, or ``None`` when idle or when
        the state cannot be interpolated (``total == 0``).
        """
        if not self.active:
            return None

        if self.total <= 0:
            self.cancel()
            return None

        self.remaining = max(self.remaining - elapsed, 0.0)
        if self.remaining < REMAINING_EPSILON:
            self.remaining = 0.0

        # Fraction of the starting value still showing: 1 at start, 0 at end
        t = self.remaining / self.total
        value = self.previous.blend(self.target, t)

        self.active = self.remaining > 0
        return value

    @property
    def progress(self) -> float:
        """Fraction of the fade completed, 0.0-1.0."""
        if self.total <= 0:
            return 1.0
        return 1.0 - self.remaining / self.total


def parse_event_names(value: str | None) -> tuple[str, ...]:
    """Split a comma separated list of event names.

    Names are trimmed, empty names are dropped and duplicates are removed
    while keeping the original order.
    """
    if not value:
        return ()
    names = (name.strip() for name in value.split(EVENT_NAME_SEPARATOR))
    return tuple(dict.fromkeys(name for name in names if name))


def _clamp_fade_time(value: Any) -> float:
    return min(max(float(value), MIN_FADE_TIME), MAX_FADE_TIME)


@dataclass(frozen=True)
class LightOnOffConfig:
    """Immutable engine configuration, built once per config entry."""

    turn_on_events: tuple[str, ...] = (DEFAULT_TURN_ON_EVENT,)
    turn_on_fade_time: float = DEFAULT_FADE_TIME
    turn_off_events: tuple[str, ...] = (DEFAULT_TURN_OFF_EVENT,)
    turn_off_fade_time: float = DEFAULT_FADE_TIME
    turn_off_at_start: bool = DEFAULT_TURN_OFF_AT_START
    enable_events: tuple[str, ...] = (DEFAULT_ENABLE_EVENT,)
    disable_events: tuple[str, ...] = (DEFAULT_DISABLE_EVENT,)
    start_enabled: bool = DEFAULT_START_ENABLED

    @property
    def has_fade_time(self) -> bool:
        """True if either direction fades rather than switching instantly."""
        return self.turn_on_fade_time > 0 or self.turn_off_fade_time > 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LightOnOffConfig:
        """Create a config from config entry data/options.

        Missing keys fall back to defaults. Fade times are clamped to the
        allowed range.
        """
        return cls(
            turn_on_events=parse_event_names(data.get(CONF_TURN_ON_EVENT, DEFAULT_TURN_ON_EVENT)),
            turn_on_fade_time=_clamp_fade_time(data.get(CONF_TURN_ON_FADE_TIME, DEFAULT_FADE_TIME)),
            turn_off_events=parse_event_names(
                data.get(CONF_TURN_OFF_EVENT, DEFAULT_TURN_OFF_EVENT)
            ),
            turn_off_fade_time=_clamp_fade_time(
                data.get(CONF_TURN_OFF_FADE_TIME, DEFAULT_FADE_TIME)
            ),
            turn_off_at_start=bool(data.get(CONF_TURN_OFF_AT_START, DEFAULT_TURN_OFF_AT_START)),
            enable_events=parse_event_names(data.get(CONF_ENABLE_EVENT, DEFAULT_ENABLE_EVENT)),
            disable_events=parse_event_names(data.get(CONF_DISABLE_EVENT, DEFAULT_DISABLE_EVENT)),
            start_enabled=bool(data.get(CONF_START_ENABLED, DEFAULT_START_ENABLED)),
        )
