"""
CLI entry point for a single validated inference run.

Usage with config file:
    python main.py -c configuration.toml

Usage with command-line args:
    python main.py -m models/pose_landmark_lite.onnx
    python main.py -m models/model.onnx --threads 4 --optimization-level all
"""
import argparse
import logging
import sys

from src.domain.entities.environment import Environment
from src.domain.entities.tensor import format_shape
from src.domain.use_cases.run_inference import RunInference
from src.infrastructure.configuration import InferenceConfiguration
from src.infrastructure.logging import setup_logging
from src.infrastructure.onnxruntime.engine import OnnxRuntimeEngine

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """
    Parse command-line arguments.

    Parameters
    ----------
    argv : list[str] | None
        Command-line arguments. If None, uses sys.argv.

    Returns
    -------
    argparse.Namespace
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Run one inference pass on an ONNX model and validate tensor shapes."
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to TOML configuration file (command-line values override it)",
    )
    parser.add_argument(
        "-m",
        "--model",
        dest="model_path",
        help="Path to the ONNX model file",
    )
    parser.add_argument(
        "--name",
        help="Environment name attached to engine log records (default: inference)",
    )
    parser.add_argument(
        "--log-level",
        choices=["verbose", "info", "warning", "error", "fatal"],
        help="Engine log level (default: info)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        help="Number of engine threads (default: 1)",
    )
    parser.add_argument(
        "--optimization-level",
        choices=["disabled", "basic", "extended", "all"],
        help="Graph optimization level (default: basic)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging for the provisioning and validation steps",
    )
    return parser.parse_args(argv)


def load_configuration(args: argparse.Namespace) -> InferenceConfiguration:
    """
    Build the configuration from a TOML file and/or command-line values.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed arguments.

    Returns
    -------
    InferenceConfiguration
        Validated configuration.
    """
    overrides = {
        "model_path": args.model_path,
        "name": args.name,
        "log_level": args.log_level,
        "threads": args.threads,
        "optimization_level": args.optimization_level,
    }
    if args.config:
        return InferenceConfiguration.load(args.config, **overrides)
    if not args.model_path:
        raise ValueError("Either --config or --model is required")
    return InferenceConfiguration(
        **{key: value for key, value in overrides.items() if value is not None}
    )


def main(argv=None) -> int:
    """
    Main entry point for a single inference run.

    Parameters
    ----------
    argv : list[str] | None
        Command-line arguments. If None, uses sys.argv.

    Returns
    -------
    int
        Process exit code: 0 on success, 1 on any failure.
    """
    args = parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = load_configuration(args)
        environment = Environment.create(
            config.name, config.log_level, OnnxRuntimeEngine()
        )
        use_case = RunInference(
            environment=environment,
            model_path=config.model_path,
            threads=config.threads,
            optimization_level=config.optimization_level,
            expected_inputs=config.expected_inputs,
            expected_outputs=config.expected_outputs,
            input_shapes=config.input_shapes,
        )
        result = use_case.run()
    except Exception as error:
        logger.debug("Inference run failed", exc_info=True)
        print(f"Error: {error}", file=sys.stderr)
        return 1

    shapes = ", ".join(format_shape(shape) for shape in result.output_shapes)
    print(f"Validated {len(result.outputs)} outputs of {result.model_path}: {shapes}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
