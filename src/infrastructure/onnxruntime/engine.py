"""
ONNX Runtime Engine Implementation.

This module provides an onnxruntime-backed implementation of the
InferenceEngine interface. Graphs are checked with `onnx.checker` before
being handed to `onnxruntime.InferenceSession` on the CPU provider.
"""
import logging
import os

import numpy as np
import onnx
import onnxruntime as ort

from src.domain.entities.errors import InferenceExecutionError, ModelLoadError
from src.domain.entities.model_descriptor import ModelDescriptor, TensorInfo
from src.domain.entities.tensor import normalize_shape
from src.domain.interfaces.inference_engine import (
    GraphOptimizationLevel,
    InferenceEngine,
    LoadedModel,
    LoggingLevel,
)

logger = logging.getLogger(__name__)

# onnxruntime severities: 0=VERBOSE, 1=INFO, 2=WARNING, 3=ERROR, 4=FATAL
SEVERITIES = {
    LoggingLevel.VERBOSE: 0,
    LoggingLevel.INFO: 1,
    LoggingLevel.WARNING: 2,
    LoggingLevel.ERROR: 3,
    LoggingLevel.FATAL: 4,
}

OPTIMIZATION_LEVELS = {
    GraphOptimizationLevel.DISABLED: ort.GraphOptimizationLevel.ORT_DISABLE_ALL,
    GraphOptimizationLevel.BASIC: ort.GraphOptimizationLevel.ORT_ENABLE_BASIC,
    GraphOptimizationLevel.EXTENDED: ort.GraphOptimizationLevel.ORT_ENABLE_EXTENDED,
    GraphOptimizationLevel.ALL: ort.GraphOptimizationLevel.ORT_ENABLE_ALL,
}

ELEMENT_TYPES = {
    "tensor(float)": "float32",
    "tensor(double)": "float64",
    "tensor(float16)": "float16",
    "tensor(int64)": "int64",
    "tensor(int32)": "int32",
    "tensor(int8)": "int8",
    "tensor(uint8)": "uint8",
    "tensor(bool)": "bool",
}

PROVIDERS = ["CPUExecutionProvider"]


def _tensor_info(node_arg) -> TensorInfo:
    """Convert an onnxruntime NodeArg into a TensorInfo."""
    return TensorInfo(
        name=node_arg.name,
        shape=normalize_shape(node_arg.shape or []),
        element_type=ELEMENT_TYPES.get(node_arg.type, node_arg.type),
    )


class OnnxRuntimeModel(LoadedModel):
    """
    A graph loaded in an onnxruntime.InferenceSession.

    Parameters
    ----------
    session : ort.InferenceSession
        The underlying onnxruntime session.
    """

    def __init__(self, session: ort.InferenceSession) -> None:
        self._session = session
        self._descriptor = ModelDescriptor(
            inputs=tuple(_tensor_info(arg) for arg in session.get_inputs()),
            outputs=tuple(_tensor_info(arg) for arg in session.get_outputs()),
        )

    @property
    def descriptor(self) -> ModelDescriptor:
        return self._descriptor

    def run(self, inputs: list[np.ndarray]) -> list[np.ndarray]:
        if self._session is None:
            raise InferenceExecutionError("Model has been released")
        feed = {
            info.name: array for info, array in zip(self._descriptor.inputs, inputs)
        }
        try:
            outputs = self._session.run(None, feed)
        except Exception as error:
            raise InferenceExecutionError(f"onnxruntime run failed: {error}") from error
        return list(outputs)

    def close(self) -> None:
        # onnxruntime frees the native session once the last reference is gone.
        self._session = None


class OnnxRuntimeEngine(InferenceEngine):
    """
    onnxruntime implementation of the InferenceEngine interface.

    The log id and severity installed by `configure_logging` are also
    applied to every session this engine creates.
    """

    def __init__(self) -> None:
        self.log_id = "onnxruntime"
        self.severity = SEVERITIES[LoggingLevel.WARNING]

    def configure_logging(self, name: str, log_level: LoggingLevel) -> None:
        severity = SEVERITIES[log_level]
        ort.set_default_logger_severity(severity)
        self.log_id = name
        self.severity = severity
        logger.debug(
            f"onnxruntime {ort.__version__}: logger severity set to {severity}"
        )

    def load(
        self,
        model_path: str,
        threads: int,
        optimization_level: GraphOptimizationLevel,
    ) -> OnnxRuntimeModel:
        if not os.path.isfile(model_path):
            raise ModelLoadError(f"Model file not found at {model_path}")

        try:
            onnx.checker.check_model(model_path)
        except Exception as error:
            raise ModelLoadError(
                f"Invalid ONNX model at {model_path}: {error}"
            ) from error

        options = ort.SessionOptions()
        options.intra_op_num_threads = threads
        options.graph_optimization_level = OPTIMIZATION_LEVELS[optimization_level]
        options.logid = self.log_id
        options.log_severity_level = self.severity

        try:
            session = ort.InferenceSession(
                model_path, sess_options=options, providers=PROVIDERS
            )
        except Exception as error:
            raise ModelLoadError(
                f"onnxruntime could not load {model_path}: {error}"
            ) from error

        logger.debug(f"Loaded {model_path} with providers {session.get_providers()}")
        return OnnxRuntimeModel(session)
