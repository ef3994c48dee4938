"""
Configuration model and loading.

Layered configuration: defaults < user < project < env vars, with .env
files loaded into the environment first.
"""

from .env import load_layered_env
from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import SpiralConfig

__all__ = [
    # Models
    "SpiralConfig",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    "load_layered_env",
]
