"""
Centralized application configuration.

Edit the variables below to configure development settings.
"""

import logging
import os

# =============================================================================
# DEVELOPMENT SETTINGS - Edit these for local development
# =============================================================================
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_TO_CONSOLE = True  # Set to True to output logs to terminal
# =============================================================================

# =============================================================================
# CANARY TOOL SETTINGS
# =============================================================================
PYTHON_ENV_VAR = "CANARY_MLX_PYTHON"
MODEL_ENV_VAR = "CANARY_MODEL"
ROOT_ENV_VAR = "CANARY_MLX_ROOT"

CANARY_HOME_DIRNAME = "canary-mlx"
DEFAULT_PYTHON_RELPATH = ".venv/bin/python"
DEFAULT_MODEL_DIRNAME = "canary-1b-v2-mlx"
CLI_MODULE = "canary_mlx.cli"
CLI_ENTRYPOINT = "main"
# =============================================================================

# =============================================================================
# PARAMETER DERIVATION
# =============================================================================
AUTO_CHUNK_THRESHOLD_SECONDS = 45.0  # Longer recordings are chunked
AUTO_CHUNK_DURATION_SECONDS = 30.0
AUTO_OVERLAP_SECONDS = 8.0
TOKENS_PER_SECOND_ESTIMATE = 6.0
MIN_MAX_GENERATION_DELTA = 200
MAX_MAX_GENERATION_DELTA = 800
PROCESS_STOP_TIMEOUT_SECONDS = 5.0  # Grace period before killing a replaced process
# =============================================================================

# =============================================================================
# RECORDING SETTINGS
# =============================================================================
RECORDING_SAMPLE_RATE = 16000
RECORDING_CHANNELS = 1
# =============================================================================


def get_log_level() -> int:
    """Get the logging level as an integer."""
    level = os.environ.get("AIKOCANARY_LOG_LEVEL", LOG_LEVEL)
    return getattr(logging, level.upper(), logging.INFO)
