"""YAML configuration loading with validation."""

import hashlib
from pathlib import Path
from typing import Any, TypeVar

import structlog
import yaml
from pydantic import BaseModel, ValidationError

from newsfilter.config.schemas import FilterConfig, ScoringConfig, TwitterSourceConfig


logger = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)

FILTER_RULES_FILE = "filter_rules.yaml"
SOURCES_FILE = "sources.yaml"
SCORING_FILE = "scoring.yaml"
COLLECTION_WINDOW_FILE = "collection_window.yaml"


class ConfigValidationError(Exception):
    """Raised when a configuration file is missing, malformed or invalid."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: Validation error details (``loc``, ``msg``, ``type``).
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


class ConfigLoader:
    """Loads configuration files from a single directory.

    Each ``load_*`` call reads its file once and returns an immutable
    snapshot; callers pass the snapshot on instead of re-reading.
    """

    def __init__(self, config_dir: Path) -> None:
        """Initialize the loader.

        Args:
            config_dir: Directory holding the YAML files.
        """
        self._config_dir = config_dir
        self._file_checksums: dict[str, str] = {}
        self._log = logger.bind(component="config", config_dir=str(config_dir))

    @property
    def file_checksums(self) -> dict[str, str]:
        """Get SHA-256 checksums of loaded files."""
        return self._file_checksums.copy()

    def _read_yaml(self, file_path: Path) -> dict[str, Any]:
        """Read a YAML mapping and record its checksum.

        Raises:
            ConfigValidationError: If the file is unreadable or not a mapping.
        """
        try:
            content_bytes = file_path.read_bytes()
        except FileNotFoundError as exc:
            raise ConfigValidationError(
                [{"loc": "", "msg": f"File not found: {file_path}", "type": "missing"}],
                str(file_path),
            ) from exc

        self._file_checksums[str(file_path.resolve())] = hashlib.sha256(
            content_bytes
        ).hexdigest()

        try:
            parsed = yaml.safe_load(content_bytes.decode("utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(
                [{"loc": "", "msg": f"YAML parse error: {exc}", "type": "yaml"}],
                str(file_path),
            ) from exc

        if not isinstance(parsed, dict):
            raise ConfigValidationError(
                [{"loc": "", "msg": "Top level must be a mapping", "type": "type"}],
                str(file_path),
            )
        return parsed

    def _validate(self, model: type[M], data: dict[str, Any], file_path: Path) -> M:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            errors = [
                {
                    "loc": ".".join(str(loc) for loc in err["loc"]),
                    "msg": err["msg"],
                    "type": err["type"],
                }
                for err in exc.errors()
            ]
            self._log.error(
                "config_validation_failed",
                file_path=str(file_path),
                validation_error_count=len(errors),
                errors=errors,
            )
            raise ConfigValidationError(errors, str(file_path)) from exc

    def _load_optional(self, model: type[M], filename: str, section: str | None) -> M:
        file_path = self._config_dir / filename
        if not file_path.exists():
            self._log.info(
                "config_file_absent_using_defaults", file_path=str(file_path)
            )
            return model()

        data = self._read_yaml(file_path)
        if section is not None:
            data = data.get(section) or {}
        config = self._validate(model, data, file_path)
        self._log.info("config_file_loaded", file_path=str(file_path))
        return config

    def load_filter_config(self) -> FilterConfig:
        """Load the required filter rules.

        Returns:
            Validated FilterConfig.

        Raises:
            ConfigValidationError: If the file is missing or invalid.
        """
        file_path = self._config_dir / FILTER_RULES_FILE
        config = self._validate(FilterConfig, self._read_yaml(file_path), file_path)
        self._log.info(
            "config_file_loaded",
            file_path=str(file_path),
            positive_examples=len(config.positive_examples),
            negative_examples=len(config.negative_examples),
            keywords=len(config.keywords),
        )
        return config

    def load_twitter_source(self) -> TwitterSourceConfig:
        """Load the ``twitter`` section of the sources file (defaults if absent)."""
        return self._load_optional(TwitterSourceConfig, SOURCES_FILE, "twitter")

    def load_scoring_config(self) -> ScoringConfig:
        """Load the scoring file (defaults if absent)."""
        return self._load_optional(ScoringConfig, SCORING_FILE, None)

    def load_collection_window(self) -> dict[str, Any] | None:
        """Read the raw recency window mapping, or None when absent.

        Validation is left to the recency provider, which falls back to
        its default instead of failing the run.
        """
        file_path = self._config_dir / COLLECTION_WINDOW_FILE
        if not file_path.exists():
            return None
        return self._read_yaml(file_path)
