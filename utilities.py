"""
Utilities module for the Rinha interpreter
Contains common helper functions shared by the operator implementations
"""

from typing import Any, Callable, Dict, List, Optional

from error_handling import DivisionByZero, TypeMismatch


# ==================== TYPE CHECKING UTILITIES ====================

def is_value_dict(val: Any) -> bool:
  """
  Check if value is a wrapped runtime value

  Args:
    val: Value to check

  Returns:
    True if val is a dict with a 'type' tag
  """
  return isinstance(val, dict) and 'type' in val


def get_dict_type(val: Any) -> str:
  """
  Safely get the type tag of a runtime value

  Args:
    val: Value dict

  Returns:
    Type string, or the Python class name for anything that is not a value
  """
  if is_value_dict(val):
    return val['type']
  return type(val).__name__


# ==================== ERROR MESSAGE BUILDERS ====================

def operation_error(op: str, left: Dict, right: Dict) -> TypeMismatch:
  """
  Generate operation error

  Args:
    op: Operator name
    left: Left operand value
    right: Right operand value

  Returns:
    TypeMismatch naming both operand types
  """
  return TypeMismatch(op, get_dict_type(left), get_dict_type(right))


# ==================== BINARY OPERATION FACTORIES ====================

def binary_comparison_op(
  op: Callable[[Any, Any], bool],
  op_name: str,
  allowed_types: Optional[List[str]] = None
) -> Callable[[Dict, Dict, Callable], Dict]:
  """
  Factory for binary ordering operations

  Args:
    op: Python operator function (e.g., operator.lt)
    op_name: Operator name for error messages
    allowed_types: Types that support this operation

  Returns:
    Function that performs the comparison

  Examples:
    rinha_lt = binary_comparison_op(operator.lt, "Lt")
    result = rinha_lt({"type": "Int", "value": 1}, {"type": "Int", "value": 2}, make_value)
  """
  if allowed_types is None:
    allowed_types = ["Int", "Str"]

  def comparison(x: Dict, y: Dict, make_value: Callable) -> Dict:
    if x['type'] != y['type'] or x['type'] not in allowed_types:
      raise operation_error(op_name, x, y)
    return make_value(op(x['value'], y['value']), "Bool")

  return comparison


def binary_arithmetic_op(
  op: Callable[[Any, Any], Any],
  op_name: str,
  allowed_types: Optional[List[str]] = None,
  zero_divisor: bool = False
) -> Callable[[Dict, Dict, Callable], Dict]:
  """
  Factory for binary arithmetic operations

  Args:
    op: Python operator function (e.g., operator.sub)
    op_name: Operator name for error messages
    allowed_types: Types that support this operation
    zero_divisor: Reject a zero right operand with DivisionByZero

  Returns:
    Function that performs the arithmetic operation

  Examples:
    rinha_sub = binary_arithmetic_op(operator.sub, "Sub")
    result = rinha_sub({"type": "Int", "value": 3}, {"type": "Int", "value": 2}, make_value)
  """
  if allowed_types is None:
    allowed_types = ["Int"]

  def arithmetic(x: Dict, y: Dict, make_value: Callable) -> Dict:
    if x['type'] != y['type'] or x['type'] not in allowed_types:
      raise operation_error(op_name, x, y)
    if zero_divisor and y['value'] == 0:
      raise DivisionByZero(op_name)
    return make_value(op(x['value'], y['value']), x['type'])

  return arithmetic
