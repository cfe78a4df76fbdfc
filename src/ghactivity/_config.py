"""
Global configuration for the github-activity client.

Convention over configuration: nothing needs to be configured, but defaults can
be changed via environment variables (GHA_*) or by calling GHA.configure() at
application startup.

Hierarchy of precedence (highest to lowest):
1. Arguments passed to the RateLimitedClient constructor (base_url, ClientOptions)
2. Values set via GHA.configure()
3. Environment variables (GHA_*) - when allow_env_override=True
4. Hardcoded defaults (in dataclass fields)

Example:
    >>> from ghactivity import GHA
    >>>
    >>> # Pre-loaded with defaults + env vars
    >>> GHA.config.client.base_url
    'https://api.github.com'
    >>>
    >>> # Point every new client at a GitHub Enterprise server
    >>> GHA.configure(client={"base_url": "https://github.example.com/api/v3"})
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from typing import Any, Self

# =============================================================================
# Exceptions
# =============================================================================


class ConfigEnvVarError(ValueError):
    """Raised when an environment variable has an invalid value."""

    def __init__(
        self,
        env_var: str,
        value: str,
        expected_type: str,
        cause: Exception | None = None,
    ):
        self.env_var = env_var
        self.value = value
        self.expected_type = expected_type
        super().__init__(f"Invalid value for {env_var}: '{value}' (expected {expected_type})")
        self.__cause__ = cause


class ConfigValidationError(ValueError):
    """Raised when a configuration value fails validation."""

    def __init__(
        self,
        field: str,
        value: Any,
        message: str,
        section: str | None = None,
    ):
        self.field = field
        self.value = value
        self.section = section
        prefix = f"[{section}] " if section else ""
        super().__init__(f"{prefix}Invalid value for '{field}': {value!r}. {message}")


# =============================================================================
# Environment Variables
# =============================================================================


class EnvVars:
    """
    Reads environment variables with type conversion.

    Example:
        >>> EnvVars.get("GHA_CLIENT_REQUEST_TIMEOUT", type_hint=float)
        30.0
        >>> EnvVars.get("UNDEFINED_VAR")
        None
    """

    @staticmethod
    def get(var_name: str, type_hint: Any = str) -> Any:
        """
        Read an environment variable, converting it according to `type_hint`.

        Returns:
            The converted value, or None if the env var is not set or empty.

        Raises:
            ConfigEnvVarError: If the value cannot be converted.
        """
        raw_value = os.environ.get(var_name)
        if not raw_value:
            return None

        converter = EnvVars._infer_converter(type_hint)
        try:
            return converter(raw_value)
        except (ValueError, TypeError) as e:
            raise ConfigEnvVarError(
                env_var=var_name,
                value=raw_value,
                expected_type=type_hint.__name__ if hasattr(type_hint, "__name__") else str(type_hint),
                cause=e,
            ) from e

    @staticmethod
    def _infer_converter(type_hint: Any) -> Callable[[str], Any]:
        # Annotations are strings here (from __future__ import annotations)
        type_str = str(type_hint)

        if type_hint is int or type_str == "int":
            return int
        if type_hint is float or type_str == "float":
            return float
        if type_hint is bool or type_str == "bool":
            return lambda v: v.lower() in ("true", "1", "yes")
        return str


# =============================================================================
# Base Class
# =============================================================================


@dataclass(frozen=True)
class OverridableConfig:
    """
    Base class for immutable configuration sections.

    Provides `.with_overrides()` and `.with_env_vars()`, both returning new
    instances. Unknown field names are rejected to catch typos early.
    """

    def with_overrides(self, overrides: dict[str, Any]) -> Self:
        """
        Return a new instance with the given fields overridden.

        None values are ignored.

        Raises:
            ValueError: If overrides contains unknown field names.
        """
        if not overrides:
            return self

        valid_fields = {f.name for f in fields(self)}
        invalid_fields = set(overrides.keys()) - valid_fields
        if invalid_fields:
            raise ValueError(
                f"Unknown config fields: {invalid_fields}. "
                f"Valid fields are: {valid_fields}"
            )

        filtered = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered) if filtered else self

    def with_env_vars(self) -> Self:
        """
        Return a new instance with environment variables applied.

        Env var names are declared in each field's metadata ("env").

        Raises:
            ConfigEnvVarError: If an env var has an invalid value.
        """
        overrides: dict[str, Any] = {}
        for f in fields(self):
            env_var = f.metadata.get("env")
            if env_var:
                value = EnvVars.get(env_var, type_hint=f.type)
                if value is not None:
                    overrides[f.name] = value
        return self.with_overrides(overrides)

    def touched_by_env(self) -> dict[str, str]:
        """Map of field name -> env var name, for fields whose env var is currently set."""
        return {
            f.name: f.metadata["env"]
            for f in fields(self)
            if f.metadata.get("env") and os.environ.get(f.metadata["env"])
        }


# =============================================================================
# Configuration Sections
# =============================================================================


@dataclass(frozen=True)
class ClientConfig(OverridableConfig):
    """
    Configuration for RateLimitedClient instances.

    Attributes:
        base_url: Base address of the GitHub REST API.
            Env var: GHA_CLIENT_BASE_URL

        request_timeout: Upper bound, in seconds, for a single HTTP call.
            A RequestContext deadline may shorten it further.
            Env var: GHA_CLIENT_REQUEST_TIMEOUT

        fallback_poll_interval: Seconds the pacer assumes between requests
            until a response tells otherwise (and after failed requests).
            Env var: GHA_CLIENT_FALLBACK_POLL_INTERVAL

        user_agent: User-Agent header sent with each request.
            Env var: GHA_CLIENT_USER_AGENT
    """

    base_url: str = field(default="https://api.github.com", metadata={"env": "GHA_CLIENT_BASE_URL"})
    request_timeout: float = field(default=30.0, metadata={"env": "GHA_CLIENT_REQUEST_TIMEOUT"})
    fallback_poll_interval: float = field(default=1.0, metadata={"env": "GHA_CLIENT_FALLBACK_POLL_INTERVAL"})
    user_agent: str = field(default="github-activity", metadata={"env": "GHA_CLIENT_USER_AGENT"})

    def validate(self) -> Self:
        """Validate client configuration fields."""
        if not self.base_url or not (self.base_url.startswith("http://") or self.base_url.startswith("https://")):
            raise ConfigValidationError(
                "base_url", self.base_url,
                "Must start with 'http://' or 'https://'.", section="client"
            )
        if self.request_timeout <= 0:
            raise ConfigValidationError(
                "request_timeout", self.request_timeout,
                "Must be greater than 0.", section="client"
            )
        if self.fallback_poll_interval < 0:
            raise ConfigValidationError(
                "fallback_poll_interval", self.fallback_poll_interval,
                "Must be >= 0.", section="client"
            )
        if not self.user_agent:
            raise ConfigValidationError(
                "user_agent", self.user_agent,
                "Must not be empty.", section="client"
            )
        return self


@dataclass(frozen=True)
class CliConfig(OverridableConfig):
    """
    Configuration for the `github-activity` command.

    Attributes:
        log_level: Logging level used when --verbose is not given.
            Env var: GHA_CLI_LOG_LEVEL
    """

    log_level: str = field(default="WARNING", metadata={"env": "GHA_CLI_LOG_LEVEL"})

    def validate(self) -> Self:
        """Validate CLI configuration fields."""
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigValidationError(
                "log_level", self.log_level,
                "Must be a standard logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
                section="cli",
            )
        return self


@dataclass(frozen=True)
class ConfigEntry:
    """
    A configuration field with its resolved value and source.

    Attributes:
        name: The field name (e.g., "base_url").
        value: The resolved value.
        source: "default", "env:VAR_NAME" or "configure".
    """

    name: str
    value: Any
    source: str

    @property
    def formatted_value(self) -> str:
        """Value formatted for display, truncated to 50 characters."""
        if self.value is None:
            return "None"
        str_value = str(self.value)
        max_length = 50
        if len(str_value) > max_length:
            return str_value[: max_length - 3] + "..."
        return str_value


_SECTIONS = ("client", "cli")


@dataclass(frozen=True)
class GHAConfig:
    """
    Root configuration, aggregating all sections.

    Attributes:
        client: RateLimitedClient defaults.
        cli: Command-line defaults.
    """

    client: ClientConfig = field(default_factory=ClientConfig)
    cli: CliConfig = field(default_factory=CliConfig)
    _sources: dict[str, dict[str, str]] = field(default_factory=dict, repr=False, compare=False)

    def with_env_vars(self) -> GHAConfig:
        """Return a new config with GHA_* environment variables applied on top."""
        sources = {section: dict(values) for section, values in self._sources.items()}
        for section_name in _SECTIONS:
            for field_name, env_var in getattr(self, section_name).touched_by_env().items():
                sources.setdefault(section_name, {})[field_name] = f"env:{env_var}"

        return GHAConfig(
            client=self.client.with_env_vars(),
            cli=self.cli.with_env_vars(),
            _sources=sources,
        )

    def with_section_overrides(
        self,
        *,
        client: dict[str, Any] | None = None,
        cli: dict[str, Any] | None = None,
    ) -> GHAConfig:
        """Return a new config with per-section overrides applied."""
        sources = {section: dict(values) for section, values in self._sources.items()}
        for section_name, overrides in (("client", client), ("cli", cli)):
            for field_name, value in (overrides or {}).items():
                if value is not None:
                    sources.setdefault(section_name, {})[field_name] = "configure"

        return GHAConfig(
            client=self.client.with_overrides(client or {}),
            cli=self.cli.with_overrides(cli or {}),
            _sources=sources,
        )

    def explain_data(self) -> dict[str, list[ConfigEntry]]:
        """Return every config value with its source, grouped by section."""
        result: dict[str, list[ConfigEntry]] = {}
        for section_name in _SECTIONS:
            section_config = getattr(self, section_name)
            section_sources = self._sources.get(section_name, {})
            result[section_name] = [
                ConfigEntry(
                    name=f.name,
                    value=getattr(section_config, f.name),
                    source=section_sources.get(f.name, "default"),
                )
                for f in fields(section_config)
            ]
        return result


# =============================================================================
# Global Configuration Singleton
# =============================================================================


class _GHA:
    """
    Singleton holding the current configuration.

    Use `GHA.configure()` to customize settings and `GHA.config` to read them.
    """

    def __init__(self) -> None:
        self._config: GHAConfig = GHAConfig().with_env_vars()

    def configure(
        self,
        *,
        client: dict[str, Any] | None = None,
        cli: dict[str, Any] | None = None,
        allow_env_override: bool = True,
    ) -> GHAConfig:
        """
        Configure defaults. Call once at application startup.

        Args:
            client: ClientConfig overrides (base_url, request_timeout, ...).
            cli: CliConfig overrides (log_level).
            allow_env_override: If True (default), env vars are used for fields
                not provided here. If False, env vars are ignored entirely.

        Returns:
            The configured GHAConfig instance.

        Raises:
            ValueError: If any dict contains unknown field names.
            ConfigValidationError: If any config value fails validation.
        """
        base = GHAConfig()
        if allow_env_override:
            base = base.with_env_vars()

        self._config = base.with_section_overrides(client=client, cli=cli)
        return self.validate()

    @property
    def config(self) -> GHAConfig:
        return self._config

    def reset(self) -> GHAConfig:
        """Reset configuration to defaults + env vars. Handy in tests."""
        self._config = GHAConfig().with_env_vars()
        return self.validate()

    def validate(self) -> GHAConfig:
        """
        Validate the current configuration.

        Raises:
            ConfigValidationError: If any config value is invalid.
        """
        self._config.client.validate()
        self._config.cli.validate()
        return self._config

    def explain(self, output: Callable[[str], None] = print) -> None:
        """
        Print current configuration with sources.

        Args:
            output: Callable receiving each line (default: print).
                Can be used with logging: `GHA.explain(logger.info)`.
        """
        name_width = 25
        output("GHA Configuration:")
        output("=" * 80)
        for section_name, entries in self._config.explain_data().items():
            output(f"[{section_name}]")
            for entry in entries:
                dots = "." * (name_width - len(entry.name))
                output(f"  {entry.name} {dots} {entry.formatted_value.ljust(50)} {entry.source}")
        output("=" * 80)

    def __repr__(self) -> str:
        return f"GHA(config={self._config!r})"


# Global singleton instance - always reflects current configuration
GHA: _GHA = _GHA()
GHA.validate()
