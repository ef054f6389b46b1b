from .logger import get_log_dir, get_logger, shutdown_logging

__all__ = ["get_log_dir", "get_logger", "shutdown_logging"]
