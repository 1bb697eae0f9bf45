"""Inference Session entity - a loaded model bound to an execution engine."""
import logging
from collections import Counter
from enum import Enum
from typing import Sequence

from src.domain.entities.environment import Environment
from src.domain.entities.errors import (
    InferenceExecutionError,
    ModelLoadError,
    SessionClosedError,
    ShapeMismatchError,
)
from src.domain.entities.model_descriptor import ModelDescriptor
from src.domain.entities.tensor import Tensor
from src.domain.interfaces.inference_engine import (
    GraphOptimizationLevel,
    LoadedModel,
)
from src.domain.services.shape_validator import assert_shape

logger = logging.getLogger(__name__)


class SessionState(Enum):
    UNOPENED = "unopened"
    LOADED = "loaded"
    READY = "ready"
    RUNNING = "running"
    CLOSED = "closed"


class InferenceSession:
    """
    A model loaded in an Environment, ready to run forward passes.

    Lifecycle: UNOPENED -> LOADED -> READY -> [RUNNING -> READY]* -> CLOSED.
    A failed run returns the session to READY. CLOSED is terminal.
    At most one run may be in flight at a time.

    Use `InferenceSession.open` rather than the constructor.
    """

    def __init__(self, environment: Environment, model_path: str) -> None:
        self.environment = environment
        self.model_path = model_path
        self.state = SessionState.UNOPENED
        self._model: LoadedModel | None = None
        self._descriptor: ModelDescriptor | None = None

    @classmethod
    def open(
        cls,
        environment: Environment,
        model_path: str,
        threads: int = 1,
        optimization_level: GraphOptimizationLevel | str = GraphOptimizationLevel.BASIC,
    ) -> tuple["InferenceSession", ModelDescriptor]:
        """
        Load a model and return the ready session with its descriptor.

        Parameters
        ----------
        environment : Environment
            Process-wide environment providing the engine.
        model_path : str
            Path to the serialized graph.
        threads : int
            Positive number of engine threads for one run.
        optimization_level : GraphOptimizationLevel | str
            Graph optimization level.

        Returns
        -------
        tuple[InferenceSession, ModelDescriptor]
            The READY session and the graph's declared inputs and outputs.

        Raises
        ------
        ValueError
            If `threads` is not a positive integer.
        ModelLoadError
            If the model cannot be loaded or its descriptor is invalid.
        """
        if isinstance(threads, bool) or not isinstance(threads, int) or threads < 1:
            raise ValueError(f"threads must be a positive integer, got {threads!r}")
        optimization_level = GraphOptimizationLevel.parse(optimization_level)

        session = cls(environment, str(model_path))
        logger.info(
            f"Loading model {session.model_path} (threads={threads}, "
            f"optimization={optimization_level.value})"
        )
        session._model = environment.engine.load(
            session.model_path, threads, optimization_level
        )
        session.state = SessionState.LOADED

        try:
            descriptor = session._model.descriptor
            _validate_descriptor(descriptor)
        except ModelLoadError:
            session.close()
            raise
        session._descriptor = descriptor
        session.state = SessionState.READY

        for info in descriptor.inputs:
            logger.debug(f"Input  {info}")
        for info in descriptor.outputs:
            logger.debug(f"Output {info}")
        return session, descriptor

    @property
    def descriptor(self) -> ModelDescriptor:
        self._ensure_open()
        return self._descriptor

    @property
    def closed(self) -> bool:
        return self.state is SessionState.CLOSED

    def run(self, inputs: Sequence[Tensor]) -> list[Tensor]:
        """
        Execute one forward pass.

        Parameters
        ----------
        inputs : Sequence[Tensor]
            One tensor per declared input, in declared order.

        Returns
        -------
        list[Tensor]
            One tensor per declared output, in declared order.

        Raises
        ------
        SessionClosedError
            If the session is closed.
        RankMismatchError
            If an input's rank differs from its declared rank.
        ShapeMismatchError
            If the input count is wrong or an input conflicts with a
            concrete declared dimension.
        InferenceExecutionError
            If a run is already in flight, or the engine fails.
        """
        self._ensure_open()
        if self.state is SessionState.RUNNING:
            raise InferenceExecutionError(
                f"A run is already in progress on session for {self.model_path}"
            )

        declared = self._descriptor.inputs
        if len(inputs) != len(declared):
            raise ShapeMismatchError(
                f"expected {len(declared)} input tensors, got {len(inputs)}",
                expected=len(declared),
                actual=len(inputs),
            )
        for index, (tensor, info) in enumerate(zip(inputs, declared)):
            assert_shape(
                tensor.shape,
                info.shape,
                label=f"input {index} ('{info.name}')",
                index=index,
            )

        self.state = SessionState.RUNNING
        try:
            arrays = self._model.run([tensor.data for tensor in inputs])
        except InferenceExecutionError:
            raise
        except Exception as error:
            raise InferenceExecutionError(
                f"Inference failed for {self.model_path}: {error}"
            ) from error
        finally:
            self.state = SessionState.READY

        if len(arrays) != len(self._descriptor.outputs):
            raise InferenceExecutionError(
                f"Engine returned {len(arrays)} outputs, model declares "
                f"{len(self._descriptor.outputs)}"
            )
        return [Tensor.from_array(array) for array in arrays]

    def close(self) -> None:
        """Release the engine resources. Closing twice is a no-op."""
        if self.state is SessionState.CLOSED:
            return
        if self._model is not None:
            self._model.close()
            self._model = None
        self.state = SessionState.CLOSED
        logger.debug(f"Closed session for {self.model_path}")

    def _ensure_open(self) -> None:
        if self.state is SessionState.CLOSED:
            raise SessionClosedError(f"Session for {self.model_path} is closed")

    def __enter__(self) -> "InferenceSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _validate_descriptor(descriptor: ModelDescriptor) -> None:
    if not descriptor.outputs:
        raise ModelLoadError("Model declares no outputs")
    for kind, names in (
        ("input", descriptor.input_names),
        ("output", descriptor.output_names),
    ):
        duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
        if duplicates:
            raise ModelLoadError(f"Model declares duplicate {kind} names: {duplicates}")
