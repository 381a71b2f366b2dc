"""Configuration management for the Marzneshin installer."""

from .manager import ConfigManager
from .schemas import SETTINGS_SCHEMA, STATE_SCHEMA

__all__ = ['ConfigManager', 'SETTINGS_SCHEMA', 'STATE_SCHEMA']
