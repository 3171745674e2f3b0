"""Domain exports."""

from .environment import (
    DEFAULT_NODE_ENV,
    DEFAULT_PORT,
    NODE_ENV,
    PORT,
    REPL_MARKER,
    EnvBinding,
    EnvResolution,
    InvocationConfig,
    persist_env,
    resolve_env,
    resolve_env_var,
)
from .project import (
    FRAMEWORK_DEPENDENCY,
    PROJECT_CONFIG,
    PROJECT_MANIFEST,
    TEST_APP_SEGMENT,
    InvalidProjectError,
    ProjectConfig,
    ProjectConfigError,
    is_eligible_project,
)

__all__ = [
    "DEFAULT_NODE_ENV",
    "DEFAULT_PORT",
    "NODE_ENV",
    "PORT",
    "REPL_MARKER",
    "EnvBinding",
    "EnvResolution",
    "InvocationConfig",
    "persist_env",
    "resolve_env",
    "resolve_env_var",
    "FRAMEWORK_DEPENDENCY",
    "PROJECT_CONFIG",
    "PROJECT_MANIFEST",
    "TEST_APP_SEGMENT",
    "InvalidProjectError",
    "ProjectConfig",
    "ProjectConfigError",
    "is_eligible_project",
]
