"""Configuration module for genenav."""

from genenav.config.settings import GeneNavSettings, build_settings, load_settings

__all__ = ["GeneNavSettings", "build_settings", "load_settings"]
