"""
Rinha AST decoder
Turns the JSON wire format into the immutable node tree of nodes.py
"""

import json
import logging
from typing import Any, Dict, Optional

from error_handling import MalformedInput, UnknownNodeKind, UnknownOperator
from nodes import (
    Location, BinaryOp, Program, Node,
    Str, Int, Bool, Print, Let, Var, If, Function, Call, Binary, Tuple, First, Second,
)


logger = logging.getLogger("RinhaDecoder")

OPERATORS = {op.value: op for op in BinaryOp}


# ============================================================================
# FIELD ACCESS
# ============================================================================

def require_field(data: Dict, key: str, expected_type: Any = None) -> Any:
  """Fetch a mandatory field from a node object, checking its JSON type"""
  if key not in data:
    raise MalformedInput(f"{data.get('kind', 'node')} is missing field '{key}'")

  value = data[key]
  # bool is an int subclass, so integer fields must reject it explicitly
  if expected_type is int and isinstance(value, bool):
    raise MalformedInput(f"field '{key}' must be int, got bool")
  if expected_type is not None and not isinstance(value, expected_type):
    expected_name = getattr(expected_type, '__name__', str(expected_type))
    raise MalformedInput(
        f"field '{key}' must be {expected_name}, got {type(value).__name__}")
  return value


def decode_location(data: Any) -> Optional[Location]:
  """Decode an optional {start, end, filename} object"""
  if not isinstance(data, dict):
    return None
  start = data.get('start')
  end = data.get('end', start)
  if not isinstance(start, int) or not isinstance(end, int):
    return None
  return Location(start, end, str(data.get('filename', '')))


def decode_identifier(data: Any, key: str) -> str:
  """Identifiers arrive as {"text": ...} objects; plain strings are accepted too"""
  if isinstance(data, str):
    return data
  if isinstance(data, dict) and isinstance(data.get('text'), str):
    return data['text']
  raise MalformedInput(f"field '{key}' must be an identifier object with 'text'")


# ============================================================================
# NODE DECODERS
# ============================================================================

def decode_str(data: Dict, location: Optional[Location]) -> Node:
  return Str(require_field(data, 'value', str), location)


def decode_int(data: Dict, location: Optional[Location]) -> Node:
  return Int(require_field(data, 'value', int), location)


def decode_bool(data: Dict, location: Optional[Location]) -> Node:
  return Bool(require_field(data, 'value', bool), location)


def decode_print(data: Dict, location: Optional[Location]) -> Node:
  return Print(decode_node(require_field(data, 'value')), location)


def decode_let(data: Dict, location: Optional[Location]) -> Node:
  name = decode_identifier(require_field(data, 'name'), 'name')
  value = decode_node(require_field(data, 'value'))
  next_node = decode_node(require_field(data, 'next'))
  return Let(name, value, next_node, location)


def decode_var(data: Dict, location: Optional[Location]) -> Node:
  return Var(require_field(data, 'text', str), location)


def decode_if(data: Dict, location: Optional[Location]) -> Node:
  return If(
      decode_node(require_field(data, 'condition')),
      decode_node(require_field(data, 'then')),
      decode_node(require_field(data, 'otherwise')),
      location
  )


def decode_function(data: Dict, location: Optional[Location]) -> Node:
  parameters = tuple(
      decode_identifier(param, 'parameters')
      for param in require_field(data, 'parameters', list)
  )
  return Function(parameters, decode_node(require_field(data, 'value')), location)


def decode_call(data: Dict, location: Optional[Location]) -> Node:
  callee = decode_node(require_field(data, 'callee'))
  arguments = tuple(decode_node(arg) for arg in require_field(data, 'arguments', list))
  return Call(callee, arguments, location)


def decode_binary(data: Dict, location: Optional[Location]) -> Node:
  op_name = require_field(data, 'op', str)
  if op_name not in OPERATORS:
    raise UnknownOperator(op_name, location)

  lhs = decode_node(require_field(data, 'lhs'))
  rhs = decode_node(require_field(data, 'rhs'))
  return Binary(OPERATORS[op_name], lhs, rhs, location)


def decode_tuple(data: Dict, location: Optional[Location]) -> Node:
  first = decode_node(require_field(data, 'first'))
  second = decode_node(require_field(data, 'second'))
  return Tuple(first, second, location)


def decode_first(data: Dict, location: Optional[Location]) -> Node:
  return First(decode_node(require_field(data, 'value')), location)


def decode_second(data: Dict, location: Optional[Location]) -> Node:
  return Second(decode_node(require_field(data, 'value')), location)


NODE_DECODERS = {
    "Str": decode_str,
    "Int": decode_int,
    "Bool": decode_bool,
    "Print": decode_print,
    "Let": decode_let,
    "Var": decode_var,
    "If": decode_if,
    "Function": decode_function,
    "Call": decode_call,
    "Binary": decode_binary,
    "Tuple": decode_tuple,
    "First": decode_first,
    "Second": decode_second,
}


def decode_node(data: Any) -> Node:
  """Decode one JSON value into a node"""
  # Bare scalars stand for literals of the matching kind
  if isinstance(data, bool):
    return Bool(data)
  if isinstance(data, int):
    return Int(data)
  if isinstance(data, str):
    return Str(data)

  if not isinstance(data, dict):
    raise MalformedInput(f"expected a node object, got {type(data).__name__}")

  kind = data.get('kind')
  if kind is None:
    raise MalformedInput("node object has no 'kind' field")
  if not isinstance(kind, str):
    raise MalformedInput(f"field 'kind' must be str, got {type(kind).__name__}")

  location = decode_location(data.get('location'))
  if kind not in NODE_DECODERS:
    raise UnknownNodeKind(kind, location)

  return NODE_DECODERS[kind](data, location)


def decode_program(data: Any) -> Program:
  """Decode a whole file object: {"name": ..., "expression": ..., "location": ...}"""
  if not isinstance(data, dict):
    raise MalformedInput(f"expected a JSON object at top level, got {type(data).__name__}")
  if 'expression' not in data:
    raise MalformedInput("top-level object is missing 'expression'")

  try:
    expression = decode_node(data['expression'])
  except RecursionError as e:
    raise MalformedInput("AST is nested too deeply to decode") from e

  name = data.get('name')
  return Program(name if isinstance(name, str) else "", expression,
                 decode_location(data.get('location')))


def decode_string(text: str, filename: str = "<input>") -> Program:
  """Decode a program from JSON text"""
  try:
    data = json.loads(text)
  except json.JSONDecodeError as e:
    raise MalformedInput(f"invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}",
                         filename) from e
  except RecursionError as e:
    raise MalformedInput("JSON is nested too deeply", filename) from e

  try:
    return decode_program(data)
  except MalformedInput as e:
    if e.path is None:
      raise MalformedInput(e.message, filename) from e
    raise


def decode_file(path: str) -> Program:
  """Read and decode a .rinha.json file"""
  logger.debug("Decoding %s", path)
  try:
    with open(path, 'r', encoding='utf-8') as f:
      content = f.read()
  except FileNotFoundError as e:
    raise MalformedInput("file not found", path) from e
  except PermissionError as e:
    raise MalformedInput("permission denied", path) from e
  except IsADirectoryError as e:
    raise MalformedInput("is a directory", path) from e
  except UnicodeDecodeError as e:
    raise MalformedInput(f"cannot decode file as UTF-8: {e.reason}", path) from e

  return decode_string(content, path)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

class RinhaDecoder:
  """Decoder handed to the host; the evaluator itself never imports this module"""

  def __init__(self, debug: bool = False):
    self.debug = debug

  def decode_file(self, path: str) -> Program:
    return decode_file(path)

  def decode_string(self, text: str, filename: str = "<input>") -> Program:
    return decode_string(text, filename)


def create_decoder(debug: bool = False) -> RinhaDecoder:
  """Create a Rinha AST decoder"""
  return RinhaDecoder(debug=debug)
