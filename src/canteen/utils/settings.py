"""Access to the ``[custom]`` section of ``domain.toml``."""

from protean.utils.globals import current_domain

DEFAULTS = {
    "token_min": 100,
    "token_max": 900,
    "history_limit": 20,
    "active_orders_poll_seconds": 5.0,
}


def custom_setting(key):
    """Return a canteen setting from the active domain, or its default.

    Reads through ``current_domain`` so ``PROTEAN_ENV`` overlays apply.
    """
    default = DEFAULTS[key]
    custom = current_domain.config.get("custom") or {}
    return type(default)(custom.get(key, default))
