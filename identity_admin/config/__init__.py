"""Configuration module for the identity admin client."""
from .settings import ToolkitConfig, load_settings

__all__ = ["ToolkitConfig", "load_settings"]
