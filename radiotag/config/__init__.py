"""
Configuration management package for radiotag

Settings are loaded from YAML files and environment variables and exposed
through a singleton accessor:

    from radiotag.config import get_settings

    settings = get_settings()
    settings.scheduler.low_water_mark

Configuration sources in order of precedence:
1. Environment variables (and .env) for deployment specific values
2. YAML configuration file
3. Dataclass defaults
"""

from .settings import get_settings, reload_settings, Settings

__all__ = [
    'get_settings',      # Factory function for singleton settings access
    'reload_settings',   # Function to hot-reload settings from files
    'Settings'           # Settings class for direct instantiation
]
