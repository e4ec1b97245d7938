"""Feed configuration loader with validation and state machine."""

import hashlib
import time
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from src.config.constants import COMPONENT_CONFIG, FILE_TYPE_FEED
from src.config.schemas.feed import FeedConfig
from src.config.state_machine import ConfigState, ConfigStateMachine


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when feed configuration cannot be loaded or validated."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


class ConfigLoader:
    """Loads and validates feed.yaml.

    Implements a state machine for configuration loading:
    UNLOADED -> LOADING -> VALIDATED -> READY
    """

    def __init__(self, session_id: str = "config") -> None:
        """Initialize the loader.

        Args:
            session_id: Identifier used for log correlation.
        """
        self._session_id = session_id
        self._state_machine = ConfigStateMachine()
        self._checksum: str | None = None
        self._validation_errors: list[dict[str, str]] = []
        self._validation_duration_ms: float = 0.0

    @property
    def state(self) -> ConfigState:
        """Get the current loader state."""
        return self._state_machine.state

    @property
    def checksum(self) -> str | None:
        """Get the SHA-256 checksum of the loaded file."""
        return self._checksum

    @property
    def validation_errors(self) -> list[dict[str, str]]:
        """Get validation errors if any."""
        return self._validation_errors.copy()

    @property
    def validation_duration_ms(self) -> float:
        """Get validation duration in milliseconds."""
        return self._validation_duration_ms

    def load(self, path: Path) -> FeedConfig:
        """Load and validate a feed configuration file.

        Args:
            path: Path to feed.yaml.

        Returns:
            Validated FeedConfig.

        Raises:
            ConfigValidationError: If the file is missing, unparseable or invalid.
            ConfigStateError: If called in an invalid state.
        """
        start_time = time.perf_counter()
        self._state_machine.transition(ConfigState.LOADING)

        log = logger.bind(
            session_id=self._session_id,
            component=COMPONENT_CONFIG,
            file_type=FILE_TYPE_FEED,
            file_path=str(path),
        )
        log.info("loading_config_file")

        try:
            content = path.read_bytes()
            self._checksum = hashlib.sha256(content).hexdigest()
            data = yaml.safe_load(content.decode("utf-8")) or {}
            config = FeedConfig.model_validate(data)
        except FileNotFoundError as e:
            self._fail(log, "file", str(e), "file_not_found")
            raise ConfigValidationError(self._validation_errors, str(path)) from e
        except OSError as e:
            self._fail(log, "file", str(e), "file_unreadable")
            raise ConfigValidationError(self._validation_errors, str(path)) from e
        except UnicodeDecodeError as e:
            self._fail(log, "file", str(e), "file_not_utf8")
            raise ConfigValidationError(self._validation_errors, str(path)) from e
        except yaml.YAMLError as e:
            self._fail(log, "yaml", str(e), "yaml_parse_error")
            raise ConfigValidationError(self._validation_errors, str(path)) from e
        except ValidationError as e:
            for err in e.errors():
                self._validation_errors.append(
                    {
                        "loc": ".".join(str(loc) for loc in err["loc"]),
                        "msg": err["msg"],
                        "type": err["type"],
                    }
                )
            self._state_machine.transition(ConfigState.FAILED)
            log.error(
                "config_validation_failed",
                validation_error_count=len(self._validation_errors),
                errors=self._validation_errors,
            )
            raise ConfigValidationError(self._validation_errors, str(path)) from e

        self._state_machine.transition(ConfigState.VALIDATED)
        self._validation_duration_ms = (time.perf_counter() - start_time) * 1000
        log.info(
            "config_file_loaded",
            file_sha256=self._checksum,
            config_validation_duration_ms=self._validation_duration_ms,
        )

        self._state_machine.transition(ConfigState.READY)
        return config

    def _fail(
        self,
        log: structlog.stdlib.BoundLogger,
        loc: str,
        msg: str,
        error_type: str,
    ) -> None:
        """Record a non-schema failure and move to FAILED."""
        self._state_machine.transition(ConfigState.FAILED)
        self._validation_errors.append({"loc": loc, "msg": msg, "type": error_type})
        log.error("config_load_failed", error_type=error_type, error=msg)


def load_feed_config(path: Path | None) -> FeedConfig:
    """Load feed configuration, or return defaults when no path is given.

    Args:
        path: Optional path to feed.yaml.

    Returns:
        Validated FeedConfig.
    """
    if path is None:
        return FeedConfig()
    return ConfigLoader().load(path)
