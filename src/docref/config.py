"""
Configuration loading from .env, environment variables and docref.yaml.

Precedence (highest first):

1. Explicit overrides passed by the caller (CLI flags)
2. **docref.yaml** values
3. **Environment** (DOCREF_ENV, DOCREF_STRICT, DOCREF_REPO_BASE_URL, ...)
4. Built-in defaults

DOCREF_STRICT is the exception to that order: when set it replaces
``strict_mode`` from docref.yaml (a CLI flag still wins). With neither set,
strict mode follows the build mode: production builds are strict,
development builds are permissive.

Relative paths in docref.yaml are resolved relative to the directory that
holds the config file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from docref.env_settings import clear_env_settings_cache, get_env_settings
from docref.exceptions import ConfigurationError
from docref.schemas.config import ConfigSchema, MissingIdentifierPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("docref.yaml")


@dataclass
class Settings:
    """Resolved settings for one build."""

    content_root: Path
    output_dir: Path
    repo_base_url: str
    default_branch: str
    strict_mode: bool
    missing_identifier: MissingIdentifierPolicy = MissingIdentifierPolicy.warn
    repo_link_requires_path: bool = False
    extensions: tuple[str, ...] = (".md", ".mdx")
    workers: int = 4
    log_file: Path | None = None
    build_env: str = "development"
    config_file: Path | None = field(default=None, repr=False)


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load docref.yaml, returning an empty dict if the file does not exist."""
    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return {}
    with open(config_path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}", config_file=config_path) from e
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Top level of the config file must be a mapping", config_file=config_path
        )
    return data


def _first_error_field(error: PydanticValidationError) -> str | None:
    errors = error.errors()
    if not errors:
        return None
    return ".".join(str(part) for part in errors[0]["loc"]) or None


def load_settings(
    config_file: Path | None = None,
    *,
    env_file: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """
    Load settings from .env, the environment and docref.yaml.

    Args:
        config_file: Path to docref.yaml (default: ./docref.yaml)
        env_file: Path to .env file (default: .env next to the config file)
        overrides: Values that win over everything else; None values are ignored

    Returns:
        Settings for one build

    Raises:
        ConfigurationError: If the config file is malformed or fails validation
    """
    config_path = config_file or DEFAULT_CONFIG_FILE

    env_path = env_file or config_path.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)
        clear_env_settings_cache()
        logger.debug("Loaded environment from %s", env_path)

    try:
        env = get_env_settings()
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid environment settings: {e}", field=_first_error_field(e)
        ) from e
    data = load_yaml_config(config_path)

    # Environment fills repository settings the YAML leaves out.
    if env.build.repo_base_url and "repo_base_url" not in data:
        data["repo_base_url"] = env.build.repo_base_url
    if env.build.default_branch and "default_branch" not in data:
        data["default_branch"] = env.build.default_branch
    # DOCREF_STRICT replaces the YAML strict_mode; caller overrides still win.
    if env.build.strict is not None:
        data["strict_mode"] = env.build.strict

    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value

    try:
        schema = ConfigSchema.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}",
            config_file=config_path,
            field=_first_error_field(e),
        ) from e

    base_dir = config_path.parent

    def resolve_path(path_str: str) -> Path:
        path = Path(path_str).expanduser()
        return path if path.is_absolute() else base_dir / path

    strict_mode = schema.strict_mode
    if strict_mode is None:
        strict_mode = env.build.strict_default

    settings = Settings(
        content_root=resolve_path(schema.content_root),
        output_dir=resolve_path(schema.output_dir),
        repo_base_url=schema.repo_base_url,
        default_branch=schema.default_branch,
        strict_mode=strict_mode,
        missing_identifier=schema.missing_identifier,
        repo_link_requires_path=schema.repo_link_requires_path,
        extensions=tuple(schema.extensions),
        workers=schema.workers,
        log_file=resolve_path(schema.log_file) if schema.log_file else None,
        build_env=env.build.env,
        config_file=config_path if config_path.exists() else None,
    )
    logger.debug(
        "Settings loaded (env=%s, strict=%s, content_root=%s)",
        settings.build_env,
        settings.strict_mode,
        settings.content_root,
    )
    return settings
