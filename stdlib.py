"""
Rinha runtime values and operators
Values are small tagged dictionaries that are never mutated once built
"""

from typing import Any, Dict, List
import operator

from error_handling import UnknownOperator
from nodes import BinaryOp
from utilities import binary_arithmetic_op, binary_comparison_op, operation_error


# ============================================================================
# VALUE CONSTRUCTORS
# ============================================================================

def make_value(value: Any, type_name: str = "Unknown") -> Dict:
  """Create an immutable runtime value"""
  return {
      'value': value,
      'type': type_name
  }


def make_int(value: int) -> Dict:
  return make_value(value, "Int")


def make_str(value: str) -> Dict:
  return make_value(value, "Str")


def make_bool(value: bool) -> Dict:
  return make_value(bool(value), "Bool")


def make_tuple(first: Dict, second: Dict) -> Dict:
  """Create a pair; the Python tuple keeps it exactly 2-ary"""
  return make_value((first, second), "Tuple")


def make_function(params: List[str], body: Any, closure_env: Dict) -> Dict:
  """Create a function value with closure"""
  return {
      'type': 'Closure',
      'params': list(params),
      'body': body,
      'closure_env': closure_env
  }


# ============================================================================
# TRUTHINESS, EQUALITY AND DISPLAY
# ============================================================================

def is_truthy(value: Dict) -> bool:
  """Only the boolean false is false; 0 and "" are true"""
  return not (value['type'] == "Bool" and value['value'] is False)


def values_equal(x: Dict, y: Dict) -> bool:
  """Structural equality across every value kind"""
  if x['type'] != y['type']:
    return False
  if x['type'] == "Tuple":
    return all(values_equal(a, b) for a, b in zip(x['value'], y['value']))
  if x['type'] == "Closure":
    return x is y
  return x['value'] == y['value']


def rinha_show(value: Dict) -> str:
  """Textual form used by Print and by string concatenation"""
  if value['type'] == "Str":
    return value['value']
  elif value['type'] == "Int":
    return str(value['value'])
  elif value['type'] == "Bool":
    return "true" if value['value'] else "false"
  elif value['type'] == "Tuple":
    first, second = value['value']
    return f"({rinha_show(first)}, {rinha_show(second)})"
  elif value['type'] == "Closure":
    return "<#closure>"
  else:
    return f"<{value['type']}>"


def rinha_print(value: Dict) -> Dict:
  """Print a value followed by a newline and hand it back"""
  print(rinha_show(value))
  return value


# ============================================================================
# ARITHMETIC
# ============================================================================

def rinha_add(x: Dict, y: Dict) -> Dict:
  """Integer addition, or concatenation when either side is a string"""
  if x['type'] == "Str" or y['type'] == "Str":
    return make_str(rinha_show(x) + rinha_show(y))
  if x['type'] == "Int" and y['type'] == "Int":
    return make_int(x['value'] + y['value'])
  raise operation_error("Add", x, y)


_rinha_sub_impl = binary_arithmetic_op(operator.sub, "Sub")
_rinha_mul_impl = binary_arithmetic_op(operator.mul, "Mul")
# Python's // and % already round toward negative infinity
_rinha_div_impl = binary_arithmetic_op(operator.floordiv, "Div", zero_divisor=True)
_rinha_rem_impl = binary_arithmetic_op(operator.mod, "Rem", zero_divisor=True)


def rinha_sub(x: Dict, y: Dict) -> Dict:
  """Subtraction"""
  return _rinha_sub_impl(x, y, make_value)


def rinha_mul(x: Dict, y: Dict) -> Dict:
  """Multiplication"""
  return _rinha_mul_impl(x, y, make_value)


def rinha_div(x: Dict, y: Dict) -> Dict:
  """Floor division"""
  return _rinha_div_impl(x, y, make_value)


def rinha_rem(x: Dict, y: Dict) -> Dict:
  """Remainder with the sign of the divisor"""
  return _rinha_rem_impl(x, y, make_value)


# ============================================================================
# COMPARISON
# ============================================================================

def rinha_eq(x: Dict, y: Dict) -> Dict:
  return make_bool(values_equal(x, y))


def rinha_neq(x: Dict, y: Dict) -> Dict:
  return make_bool(not values_equal(x, y))


_rinha_lt_impl = binary_comparison_op(operator.lt, "Lt")
_rinha_lte_impl = binary_comparison_op(operator.le, "Lte")
_rinha_gt_impl = binary_comparison_op(operator.gt, "Gt")
_rinha_gte_impl = binary_comparison_op(operator.ge, "Gte")


def rinha_lt(x: Dict, y: Dict) -> Dict:
  return _rinha_lt_impl(x, y, make_value)


def rinha_lte(x: Dict, y: Dict) -> Dict:
  return _rinha_lte_impl(x, y, make_value)


def rinha_gt(x: Dict, y: Dict) -> Dict:
  return _rinha_gt_impl(x, y, make_value)


def rinha_gte(x: Dict, y: Dict) -> Dict:
  return _rinha_gte_impl(x, y, make_value)


# ============================================================================
# OPERATOR REGISTRY
# ============================================================================

# And/Or are absent on purpose: they short-circuit inside the evaluator
BUILTIN_OPERATORS = {
    BinaryOp.ADD: rinha_add,
    BinaryOp.SUB: rinha_sub,
    BinaryOp.MUL: rinha_mul,
    BinaryOp.DIV: rinha_div,
    BinaryOp.REM: rinha_rem,
    BinaryOp.EQ: rinha_eq,
    BinaryOp.NEQ: rinha_neq,
    BinaryOp.LT: rinha_lt,
    BinaryOp.LTE: rinha_lte,
    BinaryOp.GT: rinha_gt,
    BinaryOp.GTE: rinha_gte,
}


def apply_binary_operator(op: BinaryOp, x: Dict, y: Dict) -> Dict:
  """Apply an eager binary operator to two evaluated operands"""
  if op not in BUILTIN_OPERATORS:
    raise UnknownOperator(str(op))
  return BUILTIN_OPERATORS[op](x, y)
