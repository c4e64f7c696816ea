"""Application configuration helpers."""

from __future__ import annotations

from .aem import AemConfig, ContentRoots, QueryLimits, get_aem_config, validate_aem_config
from .env import env_bool, env_float, env_int, env_list, env_str, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import BasicCredentials, RateLimit, ResilienceConfig, RetryPolicy

__all__ = [
    "AemConfig",
    "BasicCredentials",
    "ConfigurationError",
    "ContentRoots",
    "MissingConfigurationError",
    "QueryLimits",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "env_bool",
    "env_float",
    "env_int",
    "env_list",
    "env_str",
    "get_aem_config",
    "require_env_vars",
    "validate_aem_config",
]
