from .config import MeterSettings, load_settings, settings_from_env

__all__ = [
    "MeterSettings",
    "load_settings",
    "settings_from_env",
]
