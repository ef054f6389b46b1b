"""
Resolution of the canary-mlx interpreter, model and working directory.

Each path follows the same precedence: explicit override, then the
environment variable, then the ``~/canary-mlx`` convention.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional, Union

from ..settings.config import (
    CANARY_HOME_DIRNAME,
    DEFAULT_MODEL_DIRNAME,
    DEFAULT_PYTHON_RELPATH,
    MODEL_ENV_VAR,
    PYTHON_ENV_VAR,
    ROOT_ENV_VAR,
)

PathLike = Union[str, os.PathLike]


class CanaryEnvironment:
    """
    Resolves filesystem locations used to launch the canary tool.

    The environment mapping and home directory can be injected so callers
    (and tests) do not have to touch ``os.environ``.

    Example:
        env = CanaryEnvironment(env={"CANARY_MODEL": "/models/canary"})
        env.resolve_model_path(None)  # Path("/models/canary")
    """

    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        home: Optional[Path] = None,
    ):
        self._env: Mapping[str, str] = env if env is not None else os.environ
        self._home = home

    @property
    def home(self) -> Path:
        return self._home if self._home is not None else Path.home()

    @property
    def canary_home(self) -> Path:
        return self.home / CANARY_HOME_DIRNAME

    def _from_env(self, var: str) -> Optional[Path]:
        value = self._env.get(var)
        if not value:
            return None
        return Path(value)

    def resolve_interpreter_path(self, override: Optional[PathLike] = None) -> Path:
        if override is not None:
            return Path(override)
        return self._from_env(PYTHON_ENV_VAR) or self.canary_home / DEFAULT_PYTHON_RELPATH

    def resolve_model_path(self, override: Optional[PathLike] = None) -> Path:
        if override is not None:
            return Path(override)
        return self._from_env(MODEL_ENV_VAR) or self.canary_home / DEFAULT_MODEL_DIRNAME

    def resolve_tool_root(self, override: Optional[PathLike] = None) -> Optional[Path]:
        """Return the working directory for the tool, or None to inherit ours."""
        if override is not None:
            return Path(override)
        from_env = self._from_env(ROOT_ENV_VAR)
        if from_env is not None:
            return from_env
        if self.canary_home.exists():
            return self.canary_home
        return None
