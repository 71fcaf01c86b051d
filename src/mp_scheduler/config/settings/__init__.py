"""Config settings – 12-factor env-based configuration."""
from mp_scheduler.config.settings.base import Settings
from mp_scheduler.config.settings.factory import SettingsFactory
from mp_scheduler.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = [
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
]
