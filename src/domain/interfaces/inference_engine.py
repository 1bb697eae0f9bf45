"""
Inference Engine Interface.

This module defines the abstract seam to the external engine that parses a
serialized graph and executes forward passes. The domain layer only sees
ModelDescriptor metadata and numpy arrays; operator implementations,
graph optimization and numerical behaviour stay behind this interface.
"""
from abc import ABC, abstractmethod
from enum import Enum

import numpy as np

from src.domain.entities.model_descriptor import ModelDescriptor


class LoggingLevel(Enum):
    """Severity threshold for the engine's internal logging."""

    VERBOSE = "verbose"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    @classmethod
    def parse(cls, value: "str | LoggingLevel") -> "LoggingLevel":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(level.value for level in cls)
            raise ValueError(
                f"Unknown log level '{value}'. Expected one of: {choices}"
            ) from None


class GraphOptimizationLevel(Enum):
    """How aggressively the engine rewrites the graph before running it."""

    DISABLED = "disabled"
    BASIC = "basic"
    EXTENDED = "extended"
    ALL = "all"

    @classmethod
    def parse(
        cls, value: "str | GraphOptimizationLevel"
    ) -> "GraphOptimizationLevel":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(level.value for level in cls)
            raise ValueError(
                f"Unknown optimization level '{value}'. Expected one of: {choices}"
            ) from None


class LoadedModel(ABC):
    """Engine-side resources of one loaded graph."""

    @property
    @abstractmethod
    def descriptor(self) -> ModelDescriptor:
        """
        Declared inputs and outputs of the graph, in graph order.

        Returns
        -------
        ModelDescriptor
            Metadata enumerated from the loaded graph.
        """
        pass

    @abstractmethod
    def run(self, inputs: list[np.ndarray]) -> list[np.ndarray]:
        """
        Execute one forward pass.

        Parameters
        ----------
        inputs : list[np.ndarray]
            One array per declared input, in declared order.

        Returns
        -------
        list[np.ndarray]
            One array per declared output, in declared order.

        Raises
        ------
        InferenceExecutionError
            On any engine-internal failure.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release engine-side resources held for this graph."""
        pass


class InferenceEngine(ABC):
    """Abstract interface for an engine able to load and execute graphs."""

    @abstractmethod
    def configure_logging(self, name: str, log_level: LoggingLevel) -> None:
        """
        Install the engine's process-wide logging state.

        Parameters
        ----------
        name : str
            Identifier attached to engine log records.
        log_level : LoggingLevel
            Minimum severity the engine reports.

        Raises
        ------
        Exception
            Any error if the engine rejects the configuration.
        """
        pass

    @abstractmethod
    def load(
        self,
        model_path: str,
        threads: int,
        optimization_level: GraphOptimizationLevel,
    ) -> LoadedModel:
        """
        Parse a serialized graph and prepare it for execution.

        Parameters
        ----------
        model_path : str
            Path to the serialized graph.
        threads : int
            Number of threads the engine may use inside one run.
        optimization_level : GraphOptimizationLevel
            Graph optimization level applied at load time.

        Returns
        -------
        LoadedModel
            Handle exposing the descriptor and the run call.

        Raises
        ------
        ModelLoadError
            If the file is missing, unreadable or not a valid graph.
        """
        pass
