"""Configuration module for modedit."""

from .settings import CONFIG_ENV, EditorSettings, default_config_path

__all__ = ["CONFIG_ENV", "EditorSettings", "default_config_path"]
