"""Settings loader: JSON files layered under CONTEST_MEDIA__ environment variables."""

import json
import os
from pathlib import Path
from typing import Any

from contest_media.commons.settings.models import Settings

ENV_PREFIX = "CONTEST_MEDIA__"
CONFIG_DIR_VAR = "CONTEST_MEDIA_CONFIG_DIR"


def _coerce_env_value(raw: str) -> Any:
    """Turn an environment string into the JSON value it spells.

    `true`/`false`, `null`/`none`, numbers and JSON arrays or objects
    (`["mp4","mov"]`) are decoded; anything else stays a string.
    """
    lowered = raw.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("null", "none"):
        return None

    for number in (int, float):
        try:
            return number(raw)
        except ValueError:
            continue

    if raw.startswith(("[", "{")):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
    return raw


class SettingsLoader:
    """Builds `Settings` from layered sources.

    Later layers win:
    1. `appsettings.json`
    2. `appsettings.<environment>.json`
    3. `CONTEST_MEDIA__SECTION__FIELD` environment variables
    """

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
    ) -> None:
        """Initialize the settings loader.

        Args:
            config_dir: Directory holding the JSON files. Defaults to
                `$CONTEST_MEDIA_CONFIG_DIR`, then `./config`.
            environment: Environment name selecting the override file.
                Defaults to `$CONTEST_MEDIA__APP__ENVIRONMENT`, then `dev`.
        """
        self.config_dir = config_dir or Path(os.getenv(CONFIG_DIR_VAR, "config"))
        self.environment = environment or os.getenv(f"{ENV_PREFIX}APP__ENVIRONMENT", "dev")

    def load(self) -> Settings:
        """Resolve every layer into a validated Settings instance."""
        config: dict[str, Any] = {}
        for layer in (
            self._load_json("appsettings.json"),
            self._load_json(f"appsettings.{self.environment}.json"),
            self._load_env_vars(),
        ):
            config = self._deep_merge(config, layer)
        return Settings(**config)

    def _load_env_vars(self) -> dict[str, Any]:
        """Nest prefixed variables by `__`.

        `CONTEST_MEDIA__TRANSCODING__SEGMENT_SECONDS=4` becomes
        `{"transcoding": {"segment_seconds": 4}}`.
        """
        overrides: dict[str, Any] = {}
        for key, raw in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            *sections, field = key[len(ENV_PREFIX) :].lower().split("__")
            target = overrides
            for section in sections:
                target = target.setdefault(section, {})
            target[field] = _coerce_env_value(raw)
        return overrides

    def _load_json(self, filename: str) -> dict[str, Any]:
        path = self.config_dir / filename
        if not path.is_file():
            return {}
        with path.open(encoding="utf-8") as f:
            return dict(json.load(f))

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Merge `override` into a copy of `base`, recursing into sections."""
        merged = dict(base)
        for key, value in override.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = self._deep_merge(current, value)
            else:
                merged[key] = value
        return merged


_settings: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Return the process-wide settings, loading them on first use.

    Args:
        config_dir: Optional config directory override.
        environment: Optional environment override.
        reload: Discard the cached instance and load again.
    """
    global _settings  # noqa: PLW0603
    if _settings is None or reload:
        _settings = SettingsLoader(config_dir=config_dir, environment=environment).load()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings instance."""
    global _settings  # noqa: PLW0603
    _settings = None
