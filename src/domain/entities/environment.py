"""Environment entity - process-wide handle required before loading models."""
import atexit
import logging

from src.domain.entities.errors import InitializationError
from src.domain.interfaces.inference_engine import InferenceEngine, LoggingLevel

logger = logging.getLogger(__name__)


class Environment:
    """
    Process-wide inference environment.

    Exactly one environment exists per process. It owns the engine's
    internal logging configuration and is read-only once created, so it
    may be shared by several sessions.

    Use `Environment.create` rather than the constructor.

    Attributes
    ----------
    name : str
        Identifier attached to engine log records.
    log_level : LoggingLevel
        Engine logging threshold.
    engine : InferenceEngine
        Engine used by sessions opened in this environment.
    """

    _current: "Environment | None" = None

    def __init__(
        self, name: str, log_level: LoggingLevel, engine: InferenceEngine
    ) -> None:
        self.name = name
        self.log_level = log_level
        self.engine = engine

    @classmethod
    def create(
        cls,
        name: str,
        log_level: LoggingLevel | str,
        engine: InferenceEngine,
    ) -> "Environment":
        """
        Create the process-wide environment, or return the compatible one.

        Parameters
        ----------
        name : str
            Identifier attached to engine log records.
        log_level : LoggingLevel | str
            Engine logging threshold.
        engine : InferenceEngine
            Engine whose logging state is installed.

        Returns
        -------
        Environment
            The process-wide environment.

        Raises
        ------
        InitializationError
            If an environment with a different configuration already exists,
            or if the engine rejects the configuration.
        """
        if not name:
            raise InitializationError("Environment name must not be empty")
        try:
            log_level = LoggingLevel.parse(log_level)
        except ValueError as error:
            raise InitializationError(str(error)) from error

        existing = cls._current
        if existing is not None:
            if existing._matches(name, log_level, engine):
                logger.debug(f"Reusing environment '{name}'")
                return existing
            raise InitializationError(
                f"Environment '{existing.name}' (log level "
                f"{existing.log_level.value}) already exists and is "
                f"incompatible with '{name}' (log level {log_level.value})"
            )

        try:
            engine.configure_logging(name, log_level)
        except Exception as error:
            raise InitializationError(
                f"Engine rejected environment '{name}': {error}"
            ) from error

        environment = cls(name, log_level, engine)
        cls._current = environment
        logger.info(
            f"Created environment '{name}' with engine log level {log_level.value}"
        )
        return environment

    @classmethod
    def current(cls) -> "Environment | None":
        """Return the process-wide environment, or None if none exists."""
        return cls._current

    @classmethod
    def teardown(cls) -> None:
        """Drop the process-wide environment."""
        if cls._current is not None:
            logger.debug(f"Tearing down environment '{cls._current.name}'")
        cls._current = None

    def _matches(
        self, name: str, log_level: LoggingLevel, engine: InferenceEngine
    ) -> bool:
        return (
            self.name == name
            and self.log_level == log_level
            and self.engine is engine
        )

    def __repr__(self) -> str:
        return f"Environment(name={self.name!r}, log_level={self.log_level.value!r})"


atexit.register(Environment.teardown)
