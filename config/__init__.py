"""Configuration module for loading and managing application settings"""
from typing import Dict, Any, Optional
from .lib.load_settings_conf import load_settings_conf, validate_settings, SettingsError, DEFAULTS
import os

__all__ = ['get_settings', 'reset_settings', 'SettingsError', 'DEFAULTS']

_settings: Optional[Dict[str, Any]] = None

def get_settings(settings_path: Optional[str] = None) -> Dict[str, Any]:
    """Load, validate and cache settings.conf.

    Args:
        settings_path: Optional directory containing settings.conf. If not provided,
                       SWAPBOT_CONFIG_DIR is used, falling back to the current directory.

    Returns:
        Dictionary of validated settings
    """
    global _settings

    if _settings is not None and settings_path is None:
        return _settings

    path = settings_path or os.environ.get('SWAPBOT_CONFIG_DIR', '.')
    try:
        _settings = validate_settings(load_settings_conf(path))
    except SettingsError as e:
        # Re-raise the error but provide more context
        raise SettingsError(
            f"Configuration Error\n"
            "=================\n\n"
            f"{str(e)}\n\n"
            "Please ensure settings.conf is properly configured.\n"
            "Run `python -m config` to generate examples/settings.conf.example."
        ) from e
    return _settings

def reset_settings() -> None:
    """Forget cached settings so the next call reloads the file."""
    global _settings
    _settings = None
