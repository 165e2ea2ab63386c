"""Core modules for linting and fixing Markdown."""
from .config_loader import get_default_config, load_configuration

__all__ = ["get_default_config", "load_configuration"]
