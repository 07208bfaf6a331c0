"""Constants for the Light On/Off integration."""

DOMAIN = "light_on_off"

# Config keys
CONF_LIGHTS = "lights"
CONF_TURN_ON_EVENT = "turn_on_event"
CONF_TURN_ON_FADE_TIME = "turn_on_fade_time"
CONF_TURN_OFF_EVENT = "turn_off_event"
CONF_TURN_OFF_FADE_TIME = "turn_off_fade_time"
CONF_TURN_OFF_AT_START = "turn_off_at_start"
CONF_ENABLE_EVENT = "enable_event"
CONF_DISABLE_EVENT = "disable_event"
CONF_START_ENABLED = "start_enabled"

# Defaults (used when options are not set)
DEFAULT_NAME = "Light On/Off"
DEFAULT_TURN_ON_EVENT = "on"
DEFAULT_TURN_OFF_EVENT = "off"
DEFAULT_FADE_TIME = 0.1  # seconds
DEFAULT_TURN_OFF_AT_START = True
DEFAULT_ENABLE_EVENT = "light_enable"
DEFAULT_DISABLE_EVENT = "light_disable"
DEFAULT_START_ENABLED = True

# Allowed fade time range (seconds, 0 = instant)
MIN_FADE_TIME = 0.0
MAX_FADE_TIME = 5.0

# Period of the interpolation loop (seconds)
TICK_INTERVAL_S = 0.1

# Remaining fade time below this is treated as finished (float drift from
# repeated subtraction of the tick period)
REMAINING_EPSILON = 1e-9

# Event names in config fields are separated by this
EVENT_NAME_SEPARATOR = ","
