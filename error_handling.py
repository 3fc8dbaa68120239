"""
Error taxonomy and diagnostic rendering for the Rinha interpreter
Every failure is a distinct exception class carrying its own context
"""

from typing import Optional
from pyparsing import lineno, col, line


# ============================================================================
# ERROR TAXONOMY
# ============================================================================

class RinhaError(Exception):
  """Base class for every error the interpreter reports"""

  kind = "RinhaError"

  def __init__(self, message: str, location=None):
    self.message = message
    self.location = location
    super().__init__(message)

  def __str__(self) -> str:
    return f"{self.kind}: {self.message}"


class RinhaRuntimeError(RinhaError):
  """Error raised while evaluating a program"""

  kind = "RuntimeError"


class UnboundVariable(RinhaRuntimeError):
  kind = "UnboundVariable"

  def __init__(self, name: str, location=None):
    self.name = name
    super().__init__(f"variable '{name}' is not bound", location)


class NotCallable(RinhaRuntimeError):
  kind = "NotCallable"

  def __init__(self, type_name: str, location=None):
    self.type_name = type_name
    super().__init__(f"value of type {type_name} is not a function", location)


class WrongArity(RinhaRuntimeError):
  kind = "WrongArity"

  def __init__(self, expected: int, got: int, location=None):
    self.expected = expected
    self.got = got
    super().__init__(f"function expects {expected} arguments, got {got}", location)


class NotATuple(RinhaRuntimeError):
  kind = "NotATuple"

  def __init__(self, type_name: str, projection: str = "First", location=None):
    self.type_name = type_name
    self.projection = projection
    super().__init__(f"{projection} requires a Tuple, got {type_name}", location)


class DivisionByZero(RinhaRuntimeError):
  kind = "DivisionByZero"

  def __init__(self, op: str = "Div", location=None):
    self.op = op
    super().__init__(f"{op} by zero", location)


class UnknownOperator(RinhaRuntimeError):
  kind = "UnknownOperator"

  def __init__(self, op: str, location=None):
    self.op = op
    super().__init__(f"unknown binary operator '{op}'", location)


class UnknownNodeKind(RinhaRuntimeError):
  kind = "UnknownNodeKind"

  def __init__(self, node_kind: str, location=None):
    self.node_kind = node_kind
    super().__init__(f"unknown node kind '{node_kind}'", location)


class TypeMismatch(RinhaRuntimeError):
  kind = "TypeMismatch"

  def __init__(self, op: str, left_type: str, right_type: str, location=None):
    self.op = op
    self.left_type = left_type
    self.right_type = right_type
    super().__init__(f"cannot apply {op} to {left_type} and {right_type}", location)


class StackExhausted(RinhaRuntimeError):
  kind = "StackExhausted"

  def __init__(self, limit: int, location=None):
    self.limit = limit
    super().__init__(f"evaluation exceeded the maximum depth of {limit}", location)


class MalformedInput(RinhaError):
  """The AST file could not be read or decoded"""

  kind = "MalformedInput"

  def __init__(self, message: str, path: Optional[str] = None, location=None):
    self.path = path
    if path:
      message = f"{path}: {message}"
    super().__init__(message, location)


# ============================================================================
# SOURCE LOCATIONS
# ============================================================================

def describe_location(location, source_text: Optional[str] = None) -> str:
  """Render a node location as file:line:col, or file[start..end] without source"""
  filename = location.filename or "<input>"
  if source_text is None or location.start > len(source_text):
    return f"{filename}[{location.start}..{location.end}]"

  return f"{filename}:{lineno(location.start, source_text)}:{col(location.start, source_text)}"


def get_context_lines(source_text: str, start: int, end: Optional[int] = None) -> str:
  """Show the source line holding `start` with a caret marker under the span"""
  line_num = lineno(start, source_text)
  col_num = col(start, source_text)
  text = line(start, source_text)

  # Underline up to the end of the span, clipped to the current line
  width = 1
  if end is not None and end > start:
    width = max(1, min(end - start, len(text) - col_num + 1))

  return f"{line_num:4d}: {text}\n{'':6}{' ' * (col_num - 1)}{'^' * width}"


def format_diagnostic(error: RinhaError, source_text: Optional[str] = None,
                      show_context: bool = False) -> str:
  """Format an error as a single diagnostic line, optionally with source context"""
  message = str(error)
  location = getattr(error, 'location', None)
  if location is None:
    return message

  message += f" at {describe_location(location, source_text)}"

  if show_context and source_text is not None and location.start <= len(source_text):
    message += "\n" + get_context_lines(source_text, location.start, location.end)

  return message
