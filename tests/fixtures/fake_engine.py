"""FakeEngine - in-memory engine implementation for testing.

No graph is parsed: the descriptor is given up front and each run returns
zero-filled arrays of the declared output shapes, or whatever
`output_factory` produces.
"""
import os

import numpy as np

from src.domain.entities.errors import InferenceExecutionError, ModelLoadError
from src.domain.entities.model_descriptor import ModelDescriptor, TensorInfo
from src.domain.interfaces.inference_engine import InferenceEngine, LoadedModel

POSE_LANDMARK_DESCRIPTOR = ModelDescriptor(
    inputs=(TensorInfo("input_1", (1, 3, 256, 256)),),
    outputs=(
        TensorInfo("Identity", (1, 195)),
        TensorInfo("Identity_1", (1, 1)),
        TensorInfo("Identity_2", (1, 256, 256, 1)),
        TensorInfo("Identity_3", (1, 64, 64, 39)),
        TensorInfo("Identity_4", (1, 117)),
    ),
)


def zeros_for(descriptor: ModelDescriptor, inputs: list[np.ndarray]) -> list[np.ndarray]:
    """
    Zero-filled outputs of the declared shapes.

    Dynamic output axes take the size of the same axis of the first input.
    """
    outputs = []
    for info in descriptor.outputs:
        shape = [
            inputs[0].shape[axis] if dim is None else dim
            for axis, dim in enumerate(info.shape)
        ]
        outputs.append(np.zeros(shape, dtype=np.float32))
    return outputs


class FakeModel(LoadedModel):
    def __init__(self, descriptor, output_factory=None, error=None):
        self._descriptor = descriptor
        self.output_factory = output_factory or zeros_for
        self.error = error
        self.calls: list[list[np.ndarray]] = []
        self.closed = False

    @property
    def descriptor(self) -> ModelDescriptor:
        return self._descriptor

    def run(self, inputs):
        self.calls.append(inputs)
        if self.error is not None:
            raise InferenceExecutionError(str(self.error)) from self.error
        return self.output_factory(self._descriptor, inputs)

    def close(self):
        self.closed = True


class FakeEngine(InferenceEngine):
    """
    Engine double recording what it is asked to do.

    Parameters
    ----------
    descriptor : ModelDescriptor
        Descriptor reported by every loaded model.
    output_factory : Callable | None
        Function (descriptor, inputs) -> outputs; defaults to `zeros_for`.
    require_file : bool
        When True, `load` raises ModelLoadError for a missing path.
    """

    def __init__(
        self,
        descriptor: ModelDescriptor = POSE_LANDMARK_DESCRIPTOR,
        output_factory=None,
        require_file: bool = False,
    ):
        self.descriptor = descriptor
        self.output_factory = output_factory
        self.require_file = require_file
        self.logging_calls = []
        self.loaded: list[FakeModel] = []
        self.reject_logging = False

    def configure_logging(self, name, log_level):
        if self.reject_logging:
            raise RuntimeError("logger already configured")
        self.logging_calls.append((name, log_level))

    def load(self, model_path, threads, optimization_level):
        if self.require_file and not os.path.isfile(model_path):
            raise ModelLoadError(f"Model file not found at {model_path}")
        model = FakeModel(self.descriptor, self.output_factory)
        model.load_args = (model_path, threads, optimization_level)
        self.loaded.append(model)
        return model
