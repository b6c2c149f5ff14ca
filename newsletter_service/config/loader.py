"""
Settings loader.

Sources, first wins:
1. APP_<SECTION>__<KEY> environment variables, e.g. APP_DATABASE__PATH
2. configuration/<environment>.yaml (environment from APP_ENVIRONMENT, default "local")
3. configuration/base.yaml
"""

import os
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    YamlConfigSettingsSource,
)

from newsletter_service.config.models import ENVIRONMENTS, Settings

ENV_PREFIX = "APP_"
DEFAULT_CONFIG_DIR = Path(os.getcwd()) / "configuration"


def resolve_environment(value: str | None) -> str:
    environment = (value or "local").lower()
    if environment not in ENVIRONMENTS:
        raise ValueError(
            f"{environment} is not a supported environment. "
            f"Use either {' or '.join(repr(e) for e in ENVIRONMENTS)}."
        )
    return environment


def _layered(yaml_files: tuple[Path, ...]) -> type[Settings]:
    """Settings class that reads `yaml_files` (highest priority first) below env vars."""

    class LayeredSettings(Settings):
        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,
            file_secret_settings: PydanticBaseSettingsSource,
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            return (
                init_settings,
                env_settings,
                *(YamlConfigSettingsSource(settings_cls, yaml_file=path) for path in yaml_files),
            )

    return LayeredSettings


def load_settings(config_dir: Path | None = None) -> Settings:
    """
    Load and validate settings.
    Raises FileNotFoundError if base.yaml is missing.
    Raises ValueError if a file or the merged result is invalid.
    """
    directory = config_dir or DEFAULT_CONFIG_DIR
    environment = resolve_environment(os.environ.get(f"{ENV_PREFIX}ENVIRONMENT"))

    base_path = directory / "base.yaml"
    if not base_path.exists():
        raise FileNotFoundError(f"Configuration file not found at: {base_path}")

    settings_cls = _layered((directory / f"{environment}.yaml", base_path))
    try:
        return settings_cls(environment=environment)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in {directory}: {e}") from e
    except ValidationError as e:
        raise ValueError(f"Settings validation failed:\n{e}") from e


@lru_cache
def get_settings() -> Settings:
    return load_settings()
