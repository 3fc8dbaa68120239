"""
Rinha Interpreter - tree-walking evaluator
Runtime values and environments are plain dictionaries; the node tree is never mutated
"""

import logging
from typing import Any, Dict, Optional

from error_handling import (
    RinhaError, UnboundVariable, NotCallable, WrongArity, NotATuple,
    UnknownNodeKind, StackExhausted,
)
from nodes import (
    Program, BinaryOp, node_kind,
    Str, Int, Bool, Print, Let, Var, If, Function, Call, Binary, Tuple, First, Second,
)
from stdlib import (
    make_value,
    make_function,
    make_tuple,
    is_truthy,
    rinha_print,
    apply_binary_operator,
)


logger = logging.getLogger("RinhaInterpreter")

DEFAULT_MAX_DEPTH = 10000


# ============================================================================
# DATA STRUCTURES
# ============================================================================

def make_runtime_env(parent: Optional[Dict] = None, bindings: Optional[Dict] = None) -> Dict:
  """Create a runtime scope linked to its enclosing scope"""
  return {
      'parent': parent,
      'bindings': dict(bindings or {})
  }


def make_execution_context(max_depth: int = DEFAULT_MAX_DEPTH) -> Dict:
  """Per-run evaluation state: current nesting depth and its ceiling"""
  return {
      'depth': 0,
      'max_depth': max_depth
  }


# ============================================================================
# ENVIRONMENT OPERATIONS
# ============================================================================

def env_define(env: Dict, name: str, value: Dict) -> None:
  """Bind name in the current scope, replacing any binding it already holds there"""
  env['bindings'][name] = value


def env_lookup_value(env: Dict, name: str) -> Dict:
  """Look up a value in the environment chain, innermost scope first"""
  if name in env['bindings']:
    return env['bindings'][name]
  elif env['parent'] is not None:
    return env_lookup_value(env['parent'], name)
  raise UnboundVariable(name)


def env_child(env: Dict) -> Dict:
  """New empty scope whose parent is env"""
  return make_runtime_env(parent=env)


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(ast_node: Any, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """
  Evaluate an AST node to a runtime value.
  Errors raised below this node get the node's location when they have none yet.
  """
  if context is None:
    context = make_execution_context()

  evaluator = NODE_EVALUATORS.get(type(ast_node))
  if evaluator is None:
    raise UnknownNodeKind(node_kind(ast_node))

  if debug:
    logger.debug("Evaluating: %s (depth %d)", node_kind(ast_node), context['depth'])

  if context['depth'] >= context['max_depth']:
    raise StackExhausted(context['max_depth'], ast_node.location)

  context['depth'] += 1
  try:
    return evaluator(ast_node, env, debug, context)
  except RinhaError as e:
    if e.location is None:
      e.location = ast_node.location
    raise
  finally:
    context['depth'] -= 1


def eval_str(ast_node: Str, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate string literal"""
  return make_value(ast_node.value, "Str")


def eval_int(ast_node: Int, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate integer literal"""
  return make_value(ast_node.value, "Int")


def eval_bool(ast_node: Bool, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate boolean literal"""
  return make_value(ast_node.value, "Bool")


def eval_print(ast_node: Print, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate the operand, print it, and return it unchanged"""
  value = eval_ast(ast_node.value, env, debug, context)
  return rinha_print(value)


def eval_let(ast_node: Let, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Bind the value in the current scope, then continue with the next expression"""
  value = eval_ast(ast_node.value, env, debug, context)
  env_define(env, ast_node.name, value)

  if debug:
    logger.debug("Bound %s : %s", ast_node.name, value['type'])

  return eval_ast(ast_node.next, env, debug, context)


def eval_var(ast_node: Var, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate identifier by looking up in environment"""
  return env_lookup_value(env, ast_node.name)


def eval_if(ast_node: If, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate exactly one branch depending on the condition"""
  condition = eval_ast(ast_node.condition, env, debug, context)
  if is_truthy(condition):
    return eval_ast(ast_node.then, env, debug, context)
  return eval_ast(ast_node.otherwise, env, debug, context)


def eval_function(ast_node: Function, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Create function value with closure; the body is not run here"""
  return make_function(list(ast_node.parameters), ast_node.value, env)


def eval_call(ast_node: Call, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate function application"""
  callee = eval_ast(ast_node.callee, env, debug, context)
  if callee['type'] != 'Closure':
    raise NotCallable(callee['type'])

  params = callee['params']
  if len(ast_node.arguments) != len(params):
    raise WrongArity(len(params), len(ast_node.arguments))

  # Arguments run in the caller's scope, left to right
  args = [eval_ast(arg, env, debug, context) for arg in ast_node.arguments]

  # The call scope hangs off the definition-site scope, not the caller's
  call_env = env_child(callee['closure_env'])
  for name, value in zip(params, args):
    env_define(call_env, name, value)

  if debug:
    logger.debug("Calling closure(%s)", ", ".join(params))

  return eval_ast(callee['body'], call_env, debug, context)


def eval_binary(ast_node: Binary, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate binary operation"""
  left_val = eval_ast(ast_node.lhs, env, debug, context)

  # And/Or yield whichever operand decided the result
  if ast_node.op is BinaryOp.AND:
    if not is_truthy(left_val):
      return left_val
    return eval_ast(ast_node.rhs, env, debug, context)
  if ast_node.op is BinaryOp.OR:
    if is_truthy(left_val):
      return left_val
    return eval_ast(ast_node.rhs, env, debug, context)

  right_val = eval_ast(ast_node.rhs, env, debug, context)
  return apply_binary_operator(ast_node.op, left_val, right_val)


def eval_tuple(ast_node: Tuple, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate both components, first then second"""
  first = eval_ast(ast_node.first, env, debug, context)
  second = eval_ast(ast_node.second, env, debug, context)
  return make_tuple(first, second)


def eval_first(ast_node: First, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  value = eval_ast(ast_node.value, env, debug, context)
  if value['type'] != "Tuple":
    raise NotATuple(value['type'], "First")
  return value['value'][0]


def eval_second(ast_node: Second, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  value = eval_ast(ast_node.value, env, debug, context)
  if value['type'] != "Tuple":
    raise NotATuple(value['type'], "Second")
  return value['value'][1]


NODE_EVALUATORS = {
    Str: eval_str,
    Int: eval_int,
    Bool: eval_bool,
    Print: eval_print,
    Let: eval_let,
    Var: eval_var,
    If: eval_if,
    Function: eval_function,
    Call: eval_call,
    Binary: eval_binary,
    Tuple: eval_tuple,
    First: eval_first,
    Second: eval_second,
}


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def eval_program(program: Any, debug: bool = False, max_depth: int = DEFAULT_MAX_DEPTH,
                 env: Optional[Dict] = None) -> Dict:
  """
  Evaluate a decoded program (or a bare root node) against a fresh top-level scope.
  Returns the value of the root expression.
  """
  root = program.expression if isinstance(program, Program) else program
  if env is None:
    env = make_runtime_env()
  context = make_execution_context(max_depth)

  try:
    return eval_ast(root, env, debug, context)
  except RecursionError as e:
    raise StackExhausted(max_depth) from e


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

class RinhaInterpreter:
  """Runs decoded programs; each interpret() call starts from an empty scope"""

  def __init__(self, debug: bool = False, max_depth: int = DEFAULT_MAX_DEPTH):
    self.debug = debug
    self.max_depth = max_depth

  def interpret(self, program: Any) -> Dict:
    return eval_program(program, self.debug, self.max_depth)

  def evaluate(self, ast_node: Any, env: Optional[Dict] = None) -> Dict:
    return eval_program(ast_node, self.debug, self.max_depth, env)


def create_interpreter(debug: bool = False, max_depth: int = DEFAULT_MAX_DEPTH) -> RinhaInterpreter:
  """Factory function returning an interpreter"""
  return RinhaInterpreter(debug=debug, max_depth=max_depth)


def create_debug_interpreter(max_depth: int = DEFAULT_MAX_DEPTH) -> RinhaInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True, max_depth=max_depth)
