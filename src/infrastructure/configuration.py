import os
import tomllib
from dataclasses import dataclass, field

from src.domain.entities.tensor import TensorShape, is_concrete, normalize_shape
from src.domain.interfaces.inference_engine import GraphOptimizationLevel, LoggingLevel


def _parse_shape(raw: list) -> TensorShape:
    """
    Parse a shape read from TOML.

    TOML has no null, so a dynamic axis is written as a string
    (e.g. "N" or "batch").

    Parameters
    ----------
    raw : list
        List of positive integers and strings.

    Returns
    -------
    TensorShape
        Shape with strings mapped to None.

    Raises
    ------
    ValueError
        If an entry is neither a positive integer nor a string.
    """
    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"Shape must be a list, got {raw!r}")
    for dim in raw:
        if isinstance(dim, str) or dim is None:
            continue
        if isinstance(dim, bool) or not isinstance(dim, int) or dim < 1:
            raise ValueError(
                f"Invalid dimension {dim!r} in shape {raw!r}: expected a positive "
                "integer, or a string for a dynamic axis"
            )
    return normalize_shape(raw)


def _parse_shapes(raw: list | None) -> list[TensorShape] | None:
    if raw is None:
        return None
    return [_parse_shape(shape) for shape in raw]


@dataclass
class InferenceConfiguration:
    """
    Configuration for a single inference run.

    Gathers every setting of the environment and session in one object,
    validated once in `__post_init__`.
    """

    model_path: str
    name: str = "inference"
    log_level: LoggingLevel = LoggingLevel.INFO
    threads: int = 1
    optimization_level: GraphOptimizationLevel = GraphOptimizationLevel.BASIC
    expected_inputs: list[TensorShape] | None = None
    expected_outputs: list[TensorShape] | None = None
    input_shapes: dict[str, TensorShape] = field(default_factory=dict)

    def __post_init__(self):
        """Normalize enum names and shapes; reject invalid values."""
        if not self.model_path:
            raise ValueError("model_path is required")
        self.model_path = str(self.model_path)
        if not self.name:
            raise ValueError("name must not be empty")
        self.log_level = LoggingLevel.parse(self.log_level)
        self.optimization_level = GraphOptimizationLevel.parse(self.optimization_level)
        if isinstance(self.threads, bool) or not isinstance(self.threads, int) or self.threads < 1:
            raise ValueError(f"threads must be a positive integer, got {self.threads!r}")

        self.expected_inputs = _parse_shapes(self.expected_inputs)
        self.expected_outputs = _parse_shapes(self.expected_outputs)

        input_shapes = {}
        for input_name, raw in (self.input_shapes or {}).items():
            shape = _parse_shape(raw)
            if not is_concrete(shape):
                raise ValueError(
                    f"input_shapes['{input_name}'] must be fully concrete, got {raw!r}"
                )
            input_shapes[input_name] = shape
        self.input_shapes = input_shapes

    @classmethod
    def load(cls, config_path: str, **overrides) -> "InferenceConfiguration":
        """
        Load inference configuration from a TOML file.

        The [inference] table holds the scalar settings. The optional
        [inference.contract] table holds `inputs` and `outputs` shape lists
        and [inference.input_shapes] maps input names to concrete shapes.

        Parameters
        ----------
        config_path : str
            Filesystem path to a TOML file containing an "inference" table.
        **overrides
            Field values taking precedence over the file (None values are
            ignored).

        Returns
        -------
        InferenceConfiguration
            Instance populated from the "inference" table.

        Raises
        ------
        FileNotFoundError
            If no file exists at `config_path`.
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found at {config_path}")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        inference_data = dict(data.get("inference", {}))
        contract = inference_data.pop("contract", {})
        if "inputs" in contract:
            inference_data["expected_inputs"] = contract["inputs"]
        if "outputs" in contract:
            inference_data["expected_outputs"] = contract["outputs"]

        # Relative model paths are resolved against the configuration file.
        model_path = inference_data.get("model_path")
        if model_path and not os.path.isabs(model_path):
            base_dir = os.path.dirname(os.path.abspath(config_path))
            inference_data["model_path"] = os.path.join(base_dir, model_path)

        inference_data.update(
            {key: value for key, value in overrides.items() if value is not None}
        )
        return cls(**inference_data)
