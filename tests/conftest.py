"""Pytest configuration and shared fixtures."""
import pytest
from fixtures.fake_engine import FakeEngine
from fixtures.onnx_models import build_dynamic_batch_model, build_pose_landmark_model

from src.domain.entities.environment import Environment


@pytest.fixture(autouse=True)
def clean_environment():
    """
    Make sure every test starts and ends without a process-wide environment.
    """
    Environment.teardown()
    yield
    Environment.teardown()


@pytest.fixture
def fake_engine():
    """
    Provide a FakeEngine reporting the pose landmark descriptor.

    Returns:
        FakeEngine: A new FakeEngine instance.
    """
    return FakeEngine()


@pytest.fixture
def environment(fake_engine):
    """
    Provide an Environment backed by the fake engine.

    Returns:
        Environment: The process-wide environment named "test".
    """
    return Environment.create("test", "info", fake_engine)


@pytest.fixture
def pose_model_path(tmp_path):
    """
    Write a pose-landmark-shaped ONNX model to a temporary directory.

    Returns:
        str: Path to the model file.
    """
    return build_pose_landmark_model(tmp_path / "pose_landmark_lite.onnx")


@pytest.fixture
def dynamic_model_path(tmp_path):
    """
    Write an ONNX model with a dynamic batch axis to a temporary directory.

    Returns:
        str: Path to the model file.
    """
    return build_dynamic_batch_model(tmp_path / "dynamic_batch.onnx")
