"""Config flow for Shelly Dashboard integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.core import callback

from .const import CONF_RELOAD_DELAY, DEFAULT_RELOAD_DELAY, DOMAIN, MAX_RELOAD_DELAY

_LOGGER = logging.getLogger(__name__)


def _reload_delay_schema(default: float) -> vol.Schema:
    return vol.Schema(
        {
            vol.Required(CONF_RELOAD_DELAY, default=default): vol.All(
                vol.Coerce(float), vol.Range(min=0, max=MAX_RELOAD_DELAY)
            ),
        }
    )


STEP_USER_DATA_SCHEMA = _reload_delay_schema(DEFAULT_RELOAD_DELAY)


class ShellyDashboardConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Shelly Dashboard."""

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> OptionsFlow:
        """Return the options flow."""
        return ShellyDashboardOptionsFlow()

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step."""

        # Only one dashboard
        await self.async_set_unique_id(DOMAIN)
        self._abort_if_unique_id_configured()

        if user_input is not None:
            _LOGGER.debug("Creating Shelly dashboard entry: %s", user_input)
            return self.async_create_entry(title="Shelly Dashboard", data=user_input)

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors={},
        )


class ShellyDashboardOptionsFlow(OptionsFlow):
    """Handle Shelly Dashboard options."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage the reload delay."""
        if user_input is not None:
            return self.async_create_entry(data=user_input)

        current = self.config_entry.options.get(
            CONF_RELOAD_DELAY,
            self.config_entry.data.get(CONF_RELOAD_DELAY, DEFAULT_RELOAD_DELAY),
        )
        return self.async_show_form(
            step_id="init", data_schema=_reload_delay_schema(current)
        )
