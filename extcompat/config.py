"""extcompat — Configuration.

Configuration is loaded from (in order of increasing priority):
    1. Built-in defaults (this file)
    2. System config: /etc/extcompat/config.yaml
    3. User config:   ~/.extcompat/config.yaml
    4. An explicit file passed to ``Settings.load()``
    5. Environment variables prefixed with EXTCOMPAT_

Library hosts rarely need any of this: every component accepts its options
as constructor arguments.  Settings feed the process-wide default guard in
:mod:`extcompat.compat` and the CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from extcompat.exceptions import ConfigError


# ---------------------------------------------------------------------------
# Sub-configuration blocks
# ---------------------------------------------------------------------------


class LoggingConfig(BaseModel):
    level: Literal["debug", "info", "warning", "error", "critical"] = "info"
    format: Literal["json", "console"] = "console"
    file: Path | None = None


class ResolverConfig(BaseModel):
    import_missing: bool = Field(
        default=False,
        description=(
            "Import owner modules that are not loaded yet. Off by default: "
            "resolution only consults modules already in sys.modules."
        ),
    )
    search_short_names: bool = Field(
        default=True,
        description=(
            "Resolve undotted type names by scanning loaded modules for a "
            "class with that qualified name."
        ),
    )


class RegistryConfig(BaseModel):
    source: Literal["distributions", "entry_points", "static"] = Field(
        default="distributions",
        description="Where the default module registry takes its snapshots from.",
    )
    entry_point_group: str = Field(
        default="extcompat.extensions",
        description="Entry-point group scanned when source='entry_points'.",
    )
    enabled: list[str] = Field(
        default_factory=list,
        description="When non-empty, only these module IDs are reported active.",
    )
    disabled: list[str] = Field(
        default_factory=list,
        description="Module IDs reported inactive (overrides 'enabled').",
    )

    @field_validator("entry_point_group")
    @classmethod
    def _group_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("entry_point_group must not be blank")
        return v.strip()


class DiagnosticsConfig(BaseModel):
    log_by_default: bool = Field(
        default=False,
        description="Emit diagnostics when a caller does not pass log_diagnostics.",
    )
    generic_prefix: str = Field(
        default="Failed to support an extension",
        description="Diagnostic prefix used when no module ID is known.",
    )


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EXTCOMPAT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)

    @classmethod
    def load(cls, config_file: Path | None = None) -> "Settings":
        """Load settings from file + environment variables."""
        data: dict[str, object] = {}

        candidates = [
            Path("/etc/extcompat/config.yaml"),
            Path.home() / ".extcompat" / "config.yaml",
        ]
        if config_file:
            candidates.append(config_file)

        for path in candidates:
            if path.exists():
                import yaml  # lazy import, only needed when a file exists

                try:
                    with path.open() as f:
                        loaded = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as exc:
                    raise ConfigError(str(path), str(exc)) from exc
                if not isinstance(loaded, dict):
                    raise ConfigError(str(path), "top level must be a mapping")
                data.update(loaded)

        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigError(str(config_file or "<defaults>"), str(exc)) from exc


# Module-level singleton, replaced by ``override_settings()`` in tests.
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def override_settings(settings: Settings | None) -> None:
    """Replace the module-level singleton. ``None`` forces a reload."""
    global _settings
    _settings = settings
