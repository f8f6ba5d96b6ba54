"""Root pytest configuration and shared fixtures for the ciorch test suite."""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from ciorch.registry import DependencyRegistry  # noqa: E402
from ciorch_logging import configure_logger  # noqa: E402

for _package in ("ciorch", "ciorch_cli"):
    configure_logger(_package, profile="test")


@pytest.fixture(autouse=True)
def reset_dependency_registry() -> Generator[None, None, None]:
    """Give every test a fresh process-wide dependency registry."""
    DependencyRegistry.reset()
    yield
    DependencyRegistry.reset()


@pytest.fixture
def matrix_file(tmp_path: Path) -> Path:
    """Write a small but complete matrix document and return its path."""
    path = tmp_path / "matrix.yaml"
    path.write_text(
        """
version: "0.1.0"
reference_version: "3.10"
profiles:
  full:
    python_versions:
      default: ["3.11", "3.10"]
      solo-tests: ["3.12"]
    max_parallel:
      default: 2
      sharded-tests: 4
  lightened:
    python_versions:
      default: ["3.10"]
    max_parallel:
      default: 1
dependencies:
  numpy:
    constraint: ">=1.26,<2"
  torch:
    constraint: "==2.3.0"
    pip_args: ["-f", "https://example.invalid/wheels"]
jobs:
  - key: solo-tests
    markers: "solo"
  - key: sharded-tests
    axis: {name: group, values: [2, 1]}
    dependencies: [numpy]
    pytest_args: "--group {group}"
  - key: device-tests
    axis:
      name: config
      values:
        - {device: cpu, shots: 100}
        - {device: gpu, shots: None}
    dependencies: [torch]
    pytest_args: "--device={device} --shots={shots}"
""",
        encoding="utf-8",
    )
    return path
