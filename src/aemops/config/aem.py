"""AEM connection and policy configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_bool, env_float, env_int, env_list, env_str, require_env_vars
from .errors import ConfigurationError
from .http_resilience import BasicCredentials, RateLimit, ResilienceConfig

DEFAULT_AEM_HOST = "http://localhost:4502"
DEFAULT_SITE_NAME = "we-retail"
DEFAULT_LOCALE_PATH_TEMPLATE = "/content/{site}/{locale}"
DEFAULT_COMPONENT_TYPES = ("text", "image", "hero", "button", "list", "teaser", "carousel")
DEFAULT_ALLOWED_LOCALES = ("en",)
DEFAULT_QUERY_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY_SECONDS = 1.0
DEFAULT_TEMPLATE_CACHE_TTL_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class ContentRoots:
    sites: str = "/content"
    assets: str = "/content/dam"
    templates: str = "/conf"
    experience_fragments: str = "/content/experience-fragments"

    def all(self) -> tuple[str, ...]:
        return (self.sites, self.assets, self.templates, self.experience_fragments)


@dataclass(frozen=True, slots=True)
class QueryLimits:
    max_limit: int = 100
    default_limit: int = 20
    timeout_seconds: float = DEFAULT_QUERY_TIMEOUT_SECONDS
    max_depth: int = 5


@dataclass(frozen=True, slots=True)
class AemConfig:
    """Everything the connector needs to talk to one author instance."""

    host: str
    credentials: BasicCredentials
    content_roots: ContentRoots = field(default_factory=ContentRoots)
    allowed_component_types: tuple[str, ...] = DEFAULT_COMPONENT_TYPES
    allowed_locales: tuple[str, ...] = DEFAULT_ALLOWED_LOCALES
    queries: QueryLimits = field(default_factory=QueryLimits)
    site_name: str = DEFAULT_SITE_NAME
    locale_path_template: str = DEFAULT_LOCALE_PATH_TEMPLATE
    strict_replication: bool = False
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_base_delay_seconds: float = DEFAULT_RETRY_BASE_DELAY_SECONDS
    template_cache_ttl_seconds: float = DEFAULT_TEMPLATE_CACHE_TTL_SECONDS
    ratelimit: RateLimit | None = None

    def resilience(self) -> ResilienceConfig:
        return ResilienceConfig(
            name="aem",
            base_url=self.host,
            timeout_seconds=self.queries.timeout_seconds,
            ratelimit=self.ratelimit,
            credentials=self.credentials,
            default_headers={"Accept": "application/json"},
        )

    def locale_root(self, normalized_locale: str) -> str:
        return self.locale_path_template.format(site=self.site_name, locale=normalized_locale)


def get_aem_config() -> AemConfig:
    values = require_env_vars(("AEM_SERVICE_USER", "AEM_SERVICE_PASSWORD"))

    max_calls = env_int("AEM_RATE_LIMIT_CALLS", 0)
    ratelimit = (
        RateLimit(max_calls=max_calls, per_seconds=env_float("AEM_RATE_LIMIT_SECONDS", 1.0))
        if max_calls > 0
        else None
    )

    config = AemConfig(
        host=env_str("AEM_HOST", DEFAULT_AEM_HOST),
        credentials=BasicCredentials(
            username=values["AEM_SERVICE_USER"],
            password=values["AEM_SERVICE_PASSWORD"],
        ),
        content_roots=ContentRoots(
            sites=env_str("AEM_SITES_ROOT", "/content"),
            assets=env_str("AEM_ASSETS_ROOT", "/content/dam"),
            templates=env_str("AEM_TEMPLATES_ROOT", "/conf"),
            experience_fragments=env_str("AEM_XF_ROOT", "/content/experience-fragments"),
        ),
        allowed_component_types=env_list("AEM_ALLOWED_COMPONENTS", DEFAULT_COMPONENT_TYPES),
        allowed_locales=env_list("AEM_ALLOWED_LOCALES", DEFAULT_ALLOWED_LOCALES),
        queries=QueryLimits(
            max_limit=env_int("AEM_QUERY_MAX_LIMIT", 100),
            default_limit=env_int("AEM_QUERY_DEFAULT_LIMIT", 20),
            timeout_seconds=env_float("AEM_QUERY_TIMEOUT", DEFAULT_QUERY_TIMEOUT_SECONDS),
            max_depth=env_int("AEM_MAX_DEPTH", 5),
        ),
        site_name=env_str("AEM_SITE_NAME", DEFAULT_SITE_NAME),
        strict_replication=env_bool("AEM_STRICT_REPLICATION", default=False),
        max_retries=env_int("AEM_MAX_RETRIES", DEFAULT_MAX_RETRIES),
        retry_base_delay_seconds=env_float(
            "AEM_RETRY_BASE_DELAY", DEFAULT_RETRY_BASE_DELAY_SECONDS
        ),
        template_cache_ttl_seconds=env_float(
            "AEM_TEMPLATE_CACHE_TTL", DEFAULT_TEMPLATE_CACHE_TTL_SECONDS
        ),
        ratelimit=ratelimit,
    )
    validate_aem_config(config)
    return config


def validate_aem_config(config: AemConfig) -> None:
    """Collect every semantic problem and raise them together."""

    errors: list[str] = []
    if not config.host.startswith(("http://", "https://")):
        errors.append("AEM_HOST must be an http(s) URL")
    if config.queries.max_limit <= 0:
        errors.append("AEM_QUERY_MAX_LIMIT must be greater than 0")
    if config.queries.default_limit <= 0:
        errors.append("AEM_QUERY_DEFAULT_LIMIT must be greater than 0")
    elif config.queries.default_limit > config.queries.max_limit:
        errors.append("AEM_QUERY_DEFAULT_LIMIT must not exceed AEM_QUERY_MAX_LIMIT")
    if config.queries.timeout_seconds <= 0:
        errors.append("AEM_QUERY_TIMEOUT must be greater than 0")
    if config.queries.max_depth <= 0:
        errors.append("AEM_MAX_DEPTH must be greater than 0")
    if config.max_retries < 1:
        errors.append("AEM_MAX_RETRIES must be at least 1")
    if config.retry_base_delay_seconds < 0:
        errors.append("AEM_RETRY_BASE_DELAY must not be negative")
    if config.template_cache_ttl_seconds < 0:
        errors.append("AEM_TEMPLATE_CACHE_TTL must not be negative")
    if "{locale}" not in config.locale_path_template:
        errors.append("Locale path template must contain a {locale} placeholder")

    if errors:
        raise ConfigurationError("Configuration validation failed: " + "; ".join(errors), errors)
