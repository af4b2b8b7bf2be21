"""Access to the ``[custom]`` table of the domain configuration."""

from protean.utils.globals import current_domain


def setting(name: str, default=None):
    """Return a custom setting from the active domain, or ``default``."""
    custom = current_domain.config.get("custom") or {}
    value = custom.get(name)
    return default if value is None else value
