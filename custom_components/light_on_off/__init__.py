"""The Light On/Off integration."""

from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_NAME
from homeassistant.core import HomeAssistant

from .const import CONF_LIGHTS, DEFAULT_NAME, DOMAIN
from .engine import LightOnOffEngine
from .models import LightOnOffConfig

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up a Light On/Off engine from a config entry."""
    # Options override the values chosen when the entry was created
    settings = {**entry.data, **entry.options}

    engine = LightOnOffEngine(
        hass,
        name=settings.get(CONF_NAME) or entry.title or DEFAULT_NAME,
        entity_ids=settings.get(CONF_LIGHTS, []),
        config=LightOnOffConfig.from_mapping(settings),
    )
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = engine

    _LOGGER.debug("%s: Setting up for %s", engine.name, engine.entity_ids)
    engine.async_setup()

    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    return True


async def _async_update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Rebuild the engine when options change."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    engine: LightOnOffEngine | None = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if engine is not None:
        engine.async_shutdown()

    if not hass.data.get(DOMAIN):
        hass.data.pop(DOMAIN, None)

    return True
