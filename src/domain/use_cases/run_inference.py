"""
Run Inference Use-Case.

This module provides the single-run workflow: open a session on a model,
check its declared contract, provision synthetic inputs, run one forward
pass and validate the returned outputs against the declared shapes.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from src.domain.entities.environment import Environment
from src.domain.entities.session import InferenceSession
from src.domain.entities.tensor import Tensor, TensorShape, format_shape
from src.domain.interfaces.inference_engine import GraphOptimizationLevel
from src.domain.services.shape_validator import assert_shapes
from src.domain.services.tensor_provisioner import Generator, fill, resolve_shape

logger = logging.getLogger(__name__)


@dataclass
class InferenceResult:
    """Outcome of one validated inference run."""

    model_path: str
    input_shapes: list[TensorShape]
    output_shapes: list[TensorShape]
    outputs: list[Tensor] = field(repr=False)


class RunInference:
    """
    Use-case for a single validated inference run.

    This use-case orchestrates the workflow of:
    1. Opening an inference session on the model
    2. Checking the declared shapes against an expected contract, if any
    3. Provisioning one input tensor per declared input
    4. Running the forward pass
    5. Validating every output against the declared output shapes

    The session is always closed before returning.

    Attributes
    ----------
    environment : Environment
        Process-wide environment providing the engine.
    model_path : str
        Path to the serialized graph.
    threads : int
        Engine threads for the run.
    optimization_level : GraphOptimizationLevel
        Graph optimization level.
    expected_inputs : list[TensorShape] | None
        Contract for the declared input shapes.
    expected_outputs : list[TensorShape] | None
        Contract for the declared output shapes.
    input_shapes : dict[str, TensorShape]
        Concrete shapes for inputs with dynamic axes, by input name.
    generator : Generator | None
        Value generator passed to the provisioner.
    """

    def __init__(
        self,
        environment: Environment,
        model_path: str,
        threads: int = 1,
        optimization_level: GraphOptimizationLevel = GraphOptimizationLevel.BASIC,
        expected_inputs: Optional[list[TensorShape]] = None,
        expected_outputs: Optional[list[TensorShape]] = None,
        input_shapes: Optional[dict[str, TensorShape]] = None,
        generator: Optional[Generator] = None,
    ) -> None:
        self.environment = environment
        self.model_path = model_path
        self.threads = threads
        self.optimization_level = optimization_level
        self.expected_inputs = expected_inputs
        self.expected_outputs = expected_outputs
        self.input_shapes = input_shapes or {}
        self.generator = generator

    def run(self) -> InferenceResult:
        """
        Execute the workflow.

        Returns
        -------
        InferenceResult
            Shapes and values of the validated outputs.

        Raises
        ------
        InferenceError
            Any error of the taxonomy; nothing is retried.
        """
        session, descriptor = InferenceSession.open(
            self.environment,
            self.model_path,
            threads=self.threads,
            optimization_level=self.optimization_level,
        )
        with session:
            # Declared contract
            if self.expected_inputs is not None:
                assert_shapes(
                    descriptor.input_shapes,
                    self.expected_inputs,
                    kind="declared input",
                    names=descriptor.input_names,
                )
            if self.expected_outputs is not None:
                assert_shapes(
                    descriptor.output_shapes,
                    self.expected_outputs,
                    kind="declared output",
                    names=descriptor.output_names,
                )

            # Provision inputs
            inputs = []
            for info in descriptor.inputs:
                shape = resolve_shape(
                    info.shape, self.input_shapes.get(info.name), name=info.name
                )
                tensor = fill(shape, self.generator)
                logger.info(
                    f"Provisioned input '{info.name}' {format_shape(tensor.shape)} "
                    f"({tensor.element_count} elements)"
                )
                inputs.append(tensor)

            # Run and validate
            logger.info(f"Running inference on {self.model_path}...")
            outputs = session.run(inputs)
            output_shapes = [tensor.shape for tensor in outputs]
            assert_shapes(
                output_shapes,
                descriptor.output_shapes,
                kind="output",
                names=descriptor.output_names,
            )
            for name, shape in zip(descriptor.output_names, output_shapes):
                logger.info(f"Output '{name}' {format_shape(shape)} matches contract")

        return InferenceResult(
            model_path=self.model_path,
            input_shapes=[tensor.shape for tensor in inputs],
            output_shapes=output_shapes,
            outputs=outputs,
        )
