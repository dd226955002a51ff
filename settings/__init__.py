"""
Configuration models and loaders for the provisioning engine.
"""

from settings.config_models import AppSettings

__all__ = ["AppSettings"]
