"""
Test configuration for the Rinha interpreter tests
"""

import logging
import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from decoding import decode_node
from interpreter import create_interpreter


@pytest.fixture
def interpreter():
  """Provide a fresh interpreter for each test"""
  return create_interpreter()


@pytest.fixture
def run(interpreter):
  """Decode a JSON-shaped node and evaluate it in an empty environment"""
  def evaluate(data):
    return interpreter.interpret(decode_node(data))
  return evaluate


@pytest.fixture
def examples_dir():
  """Directory holding the sample .rinha.json programs"""
  return project_root / "examples"


@pytest.fixture(autouse=True)
def quiet_logging():
  """main() may switch the root logger to DEBUG; put it back after each test"""
  yield
  logging.getLogger().setLevel(logging.WARNING)
