"""ModelDescriptor entity - declared inputs and outputs of a loaded graph."""
from dataclasses import dataclass

from src.domain.entities.tensor import TensorShape, format_shape


@dataclass(frozen=True)
class TensorInfo:
    """Name, declared shape and element type of one graph input or output."""

    name: str
    shape: TensorShape
    element_type: str = "float32"

    @property
    def rank(self) -> int:
        return len(self.shape)

    def __str__(self) -> str:
        return f"{self.name}: {self.element_type}{format_shape(self.shape)}"


@dataclass(frozen=True)
class ModelDescriptor:
    """
    Immutable metadata of a loaded model.

    Inputs and outputs are kept in the graph's declared order; consumers
    index tensors positionally against these tuples.

    Attributes
    ----------
    inputs : tuple[TensorInfo, ...]
        Declared graph inputs.
    outputs : tuple[TensorInfo, ...]
        Declared graph outputs.
    """

    inputs: tuple[TensorInfo, ...]
    outputs: tuple[TensorInfo, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))

    @property
    def input_shapes(self) -> list[TensorShape]:
        return [info.shape for info in self.inputs]

    @property
    def output_shapes(self) -> list[TensorShape]:
        return [info.shape for info in self.outputs]

    @property
    def input_names(self) -> list[str]:
        return [info.name for info in self.inputs]

    @property
    def output_names(self) -> list[str]:
        return [info.name for info in self.outputs]
