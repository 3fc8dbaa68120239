"""
Rinha AST node model
Frozen dataclasses for the closed set of node kinds produced by the decoder
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple as TupleOf, Union


@dataclass(frozen=True)
class Location:
  """Byte offsets of a node inside its original source file"""
  start: int
  end: int
  filename: str = ""

  def __str__(self) -> str:
    return f"{self.filename or '<input>'}[{self.start}..{self.end}]"


class BinaryOp(Enum):
  ADD = "Add"
  SUB = "Sub"
  MUL = "Mul"
  DIV = "Div"
  REM = "Rem"
  EQ = "Eq"
  NEQ = "Neq"
  LT = "Lt"
  LTE = "Lte"
  GT = "Gt"
  GTE = "Gte"
  AND = "And"
  OR = "Or"

  def __str__(self) -> str:
    return self.value


# ============================================================================
# NODE KINDS
# ============================================================================

@dataclass(frozen=True)
class Str:
  value: str
  location: Optional[Location] = None


@dataclass(frozen=True)
class Int:
  value: int
  location: Optional[Location] = None


@dataclass(frozen=True)
class Bool:
  value: bool
  location: Optional[Location] = None


@dataclass(frozen=True)
class Print:
  value: 'Node'
  location: Optional[Location] = None


@dataclass(frozen=True)
class Let:
  name: str
  value: 'Node'
  next: 'Node'
  location: Optional[Location] = None


@dataclass(frozen=True)
class Var:
  name: str
  location: Optional[Location] = None


@dataclass(frozen=True)
class If:
  condition: 'Node'
  then: 'Node'
  otherwise: 'Node'
  location: Optional[Location] = None


@dataclass(frozen=True)
class Function:
  parameters: TupleOf[str, ...]
  value: 'Node'
  location: Optional[Location] = None


@dataclass(frozen=True)
class Call:
  callee: 'Node'
  arguments: TupleOf['Node', ...]
  location: Optional[Location] = None


@dataclass(frozen=True)
class Binary:
  op: BinaryOp
  lhs: 'Node'
  rhs: 'Node'
  location: Optional[Location] = None


@dataclass(frozen=True)
class Tuple:
  first: 'Node'
  second: 'Node'
  location: Optional[Location] = None


@dataclass(frozen=True)
class First:
  value: 'Node'
  location: Optional[Location] = None


@dataclass(frozen=True)
class Second:
  value: 'Node'
  location: Optional[Location] = None


Node = Union[Str, Int, Bool, Print, Let, Var, If, Function, Call, Binary, Tuple, First, Second]

NODE_KINDS = {
    cls.__name__: cls
    for cls in (Str, Int, Bool, Print, Let, Var, If, Function, Call, Binary, Tuple, First, Second)
}


@dataclass(frozen=True)
class Program:
  """Decoded file root: the program name and its single root expression"""
  name: str
  expression: Node
  location: Optional[Location] = None


def node_kind(node) -> str:
  """Kind name of a node, or of whatever foreign object was passed instead"""
  return type(node).__name__


# ============================================================================
# PRETTY PRINTING
# ============================================================================

def pretty_print_node(node, indent: int = 0) -> str:
  """Render a node tree as indented text, one node per line"""
  prefix = "  " * indent

  if isinstance(node, (Str, Int, Bool)):
    return f"{prefix}{node_kind(node)}({node.value!r})"
  if isinstance(node, Var):
    return f"{prefix}Var({node.name})"
  if isinstance(node, Let):
    return "\n".join([
        f"{prefix}Let({node.name})",
        pretty_print_node(node.value, indent + 1),
        pretty_print_node(node.next, indent + 1),
    ])
  if isinstance(node, Function):
    return "\n".join([
        f"{prefix}Function({', '.join(node.parameters)})",
        pretty_print_node(node.value, indent + 1),
    ])
  if isinstance(node, Call):
    lines = [f"{prefix}Call", pretty_print_node(node.callee, indent + 1)]
    lines.extend(pretty_print_node(arg, indent + 2) for arg in node.arguments)
    return "\n".join(lines)
  if isinstance(node, Binary):
    return "\n".join([
        f"{prefix}Binary({node.op})",
        pretty_print_node(node.lhs, indent + 1),
        pretty_print_node(node.rhs, indent + 1),
    ])
  if isinstance(node, If):
    return "\n".join([
        f"{prefix}If",
        pretty_print_node(node.condition, indent + 1),
        pretty_print_node(node.then, indent + 1),
        pretty_print_node(node.otherwise, indent + 1),
    ])
  if isinstance(node, Tuple):
    return "\n".join([
        f"{prefix}Tuple",
        pretty_print_node(node.first, indent + 1),
        pretty_print_node(node.second, indent + 1),
    ])
  if isinstance(node, (Print, First, Second)):
    return "\n".join([f"{prefix}{node_kind(node)}", pretty_print_node(node.value, indent + 1)])

  return f"{prefix}<{node_kind(node)}>"
