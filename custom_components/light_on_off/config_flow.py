"""Config flow for Light On/Off integration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import voluptuous as vol
from homeassistant.components.light.const import DOMAIN as LIGHT_DOMAIN
from homeassistant.config_entries import ConfigEntry, ConfigFlow, ConfigFlowResult, OptionsFlow
from homeassistant.const import CONF_NAME
from homeassistant.core import callback
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers import selector

from .const import (
    CONF_DISABLE_EVENT,
    CONF_ENABLE_EVENT,
    CONF_LIGHTS,
    CONF_START_ENABLED,
    CONF_TURN_OFF_AT_START,
    CONF_TURN_OFF_EVENT,
    CONF_TURN_OFF_FADE_TIME,
    CONF_TURN_ON_EVENT,
    CONF_TURN_ON_FADE_TIME,
    DEFAULT_DISABLE_EVENT,
    DEFAULT_ENABLE_EVENT,
    DEFAULT_FADE_TIME,
    DEFAULT_NAME,
    DEFAULT_START_ENABLED,
    DEFAULT_TURN_OFF_AT_START,
    DEFAULT_TURN_OFF_EVENT,
    DEFAULT_TURN_ON_EVENT,
    DOMAIN,
    MAX_FADE_TIME,
    MIN_FADE_TIME,
)
from .models import parse_event_names

EVENT_FIELDS = (
    CONF_TURN_ON_EVENT,
    CONF_TURN_OFF_EVENT,
    CONF_ENABLE_EVENT,
    CONF_DISABLE_EVENT,
)


def _settings_schema(defaults: Mapping[str, Any]) -> dict:
    """Build the schema fields shared by the user step and the options flow."""
    return {
        vol.Required(CONF_LIGHTS, default=defaults.get(CONF_LIGHTS, [])): selector.EntitySelector(
            selector.EntitySelectorConfig(domain=LIGHT_DOMAIN, multiple=True)
        ),
        vol.Optional(
            CONF_TURN_ON_EVENT,
            default=defaults.get(CONF_TURN_ON_EVENT, DEFAULT_TURN_ON_EVENT),
        ): cv.string,
        vol.Optional(
            CONF_TURN_ON_FADE_TIME,
            default=defaults.get(CONF_TURN_ON_FADE_TIME, DEFAULT_FADE_TIME),
        ): vol.All(vol.Coerce(float), vol.Range(min=MIN_FADE_TIME, max=MAX_FADE_TIME)),
        vol.Optional(
            CONF_TURN_OFF_EVENT,
            default=defaults.get(CONF_TURN_OFF_EVENT, DEFAULT_TURN_OFF_EVENT),
        ): cv.string,
        vol.Optional(
            CONF_TURN_OFF_FADE_TIME,
            default=defaults.get(CONF_TURN_OFF_FADE_TIME, DEFAULT_FADE_TIME),
        ): vol.All(vol.Coerce(float), vol.Range(min=MIN_FADE_TIME, max=MAX_FADE_TIME)),
        vol.Optional(
            CONF_TURN_OFF_AT_START,
            default=defaults.get(CONF_TURN_OFF_AT_START, DEFAULT_TURN_OFF_AT_START),
        ): cv.boolean,
        vol.Optional(
            CONF_ENABLE_EVENT,
            default=defaults.get(CONF_ENABLE_EVENT, DEFAULT_ENABLE_EVENT),
        ): cv.string,
        vol.Optional(
            CONF_DISABLE_EVENT,
            default=defaults.get(CONF_DISABLE_EVENT, DEFAULT_DISABLE_EVENT),
        ): cv.string,
        vol.Optional(
            CONF_START_ENABLED,
            default=defaults.get(CONF_START_ENABLED, DEFAULT_START_ENABLED),
        ): cv.boolean,
    }


def _validate_settings(user_input: Mapping[str, Any]) -> dict[str, str]:
    """Return form errors keyed by field, empty if the input is usable."""
    errors: dict[str, str] = {}
    if not user_input.get(CONF_LIGHTS):
        errors[CONF_LIGHTS] = "no_lights"
    for key in EVENT_FIELDS:
        if key in user_input and not parse_event_names(user_input[key]):
            errors[key] = "no_event_names"
    return errors


class LightOnOffConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Light On/Off."""

    VERSION = 1
    MINOR_VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = _validate_settings(user_input)
            if not errors:
                name = user_input.pop(CONF_NAME, DEFAULT_NAME)
                return self.async_create_entry(title=name, data=user_input)

        defaults = user_input or {}
        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_NAME, default=defaults.get(CONF_NAME, DEFAULT_NAME)): cv.string,
                    **_settings_schema(defaults),
                }
            ),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> LightOnOffOptionsFlow:
        """Get the options flow for this handler."""
        return LightOnOffOptionsFlow()


class LightOnOffOptionsFlow(OptionsFlow):
    """Handle options flow for Light On/Off."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage the options."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = _validate_settings(user_input)
            if not errors:
                return self.async_create_entry(title="", data=user_input)

        defaults = user_input or {**self.config_entry.data, **self.config_entry.options}

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(_settings_schema(defaults)),
            errors=errors,
        )
