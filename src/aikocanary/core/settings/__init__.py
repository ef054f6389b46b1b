from .settings import Settings, get_config_dir, get_settings

__all__ = ["Settings", "get_config_dir", "get_settings"]
