"""
Evaluation tests for the Rinha interpreter
"""

import pytest

from ast_builders import (
    lit_int, lit_str, lit_bool, var, let, fn, call, binary, if_, print_,
    tuple_, first, second, seq, fib_program,
)
from decoding import decode_node
from error_handling import (
    UnboundVariable, NotCallable, WrongArity, NotATuple, DivisionByZero,
    UnknownNodeKind, TypeMismatch, StackExhausted,
)
from interpreter import (
    create_interpreter, eval_ast, eval_program, make_runtime_env, make_execution_context,
    env_define, NODE_EVALUATORS,
)
from nodes import NODE_KINDS, Location, Var


class TestLiterals:
  """Literals evaluate to their payload"""

  def test_int(self, run):
    assert run(lit_int(42)) == {'type': 'Int', 'value': 42}

  def test_str(self, run):
    assert run(lit_str("hi")) == {'type': 'Str', 'value': 'hi'}

  def test_bool(self, run):
    assert run(lit_bool(False)) == {'type': 'Bool', 'value': False}


class TestLetAndVar:
  """Bindings and lookup"""

  def test_let_then_print(self, run, capsys):
    """let x = 1 + 2; print(x) prints 3"""
    result = run(let("x", binary("Add", lit_int(1), lit_int(2)), print_(var("x"))))
    assert result == {'type': 'Int', 'value': 3}
    assert capsys.readouterr().out == "3\n"

  def test_unbound_variable(self, run):
    with pytest.raises(UnboundVariable) as exc_info:
      run(var("y"))
    assert exc_info.value.name == "y"

  def test_let_rebinding_shadows(self, run):
    program = let("x", lit_int(1), let("x", lit_int(2), var("x")))
    assert run(program)['value'] == 2

  def test_let_extends_current_scope(self):
    """Let binds in the environment it is evaluated in"""
    env = make_runtime_env()
    eval_ast(decode_node(let("x", lit_int(7), var("x"))), env)
    assert env['bindings']['x'] == {'type': 'Int', 'value': 7}


class TestPrint:
  """Print writes the display text and returns its operand"""

  def test_print_concatenation(self, run, capsys):
    run(print_(binary("Add", lit_str("Hello"), lit_str(" World"))))
    assert capsys.readouterr().out == "Hello World\n"

  def test_print_returns_value(self, run, capsys):
    result = run(print_(lit_bool(True)))
    assert result == {'type': 'Bool', 'value': True}
    assert capsys.readouterr().out == "true\n"

  def test_print_tuple_and_closure(self, run, capsys):
    run(seq(print_(tuple_(lit_int(1), tuple_(lit_str("a"), lit_bool(False)))),
            print_(fn([], lit_int(0)))))
    assert capsys.readouterr().out == "(1, (a, false))\n<#closure>\n"

  def test_print_order_is_left_to_right(self, run, capsys):
    run(binary("Add", print_(lit_int(1)), print_(lit_int(2))))
    assert capsys.readouterr().out == "1\n2\n"


class TestIf:
  """Only the boolean false selects the otherwise branch"""

  def test_false_takes_otherwise(self, run):
    assert run(if_(lit_bool(False), lit_int(1), lit_int(2)))['value'] == 2

  @pytest.mark.parametrize("condition", [lit_int(0), lit_str(""), lit_bool(True)])
  def test_other_values_are_true(self, run, condition):
    assert run(if_(condition, lit_int(1), lit_int(2)))['value'] == 1

  def test_only_one_branch_runs(self, run, capsys):
    run(if_(lit_bool(True), print_(lit_str("then")), print_(lit_str("otherwise"))))
    assert capsys.readouterr().out == "then\n"


class TestFunctions:
  """Closures, calls and arity"""

  def test_function_body_not_run_on_definition(self, run, capsys):
    result = run(fn(["x"], print_(var("x"))))
    assert result['type'] == 'Closure'
    assert capsys.readouterr().out == ""

  def test_call(self, run):
    program = call(fn(["a", "b"], binary("Sub", var("a"), var("b"))), lit_int(10), lit_int(3))
    assert run(program)['value'] == 7

  def test_recursive_fib(self, run):
    assert run(fib_program(10)) == {'type': 'Int', 'value': 55}

  def test_closure_sees_definition_site(self, run):
    """A returned closure keeps its own x even when the caller binds another x"""
    program = let(
        "make", fn([], let("x", lit_int(1), fn([], var("x")))),
        let("x", lit_int(99),
            let("g", call(var("make")),
                call(var("g"))))
    )
    assert run(program)['value'] == 1

  def test_callee_does_not_see_caller_scope(self, run):
    program = let(
        "f", fn([], var("secret")),
        call(fn(["secret"], call(var("f"))), lit_int(1))
    )
    with pytest.raises(UnboundVariable):
      run(program)

  def test_call_scope_is_fresh_per_call(self, run):
    program = let(
        "id", fn(["v"], var("v")),
        binary("Add", call(var("id"), lit_int(1)), call(var("id"), lit_int(2)))
    )
    assert run(program)['value'] == 3

  def test_mutual_recursion(self, run):
    is_even = fn(["n"], if_(binary("Eq", var("n"), lit_int(0)), lit_bool(True),
                            call(var("is_odd"), binary("Sub", var("n"), lit_int(1)))))
    is_odd = fn(["n"], if_(binary("Eq", var("n"), lit_int(0)), lit_bool(False),
                           call(var("is_even"), binary("Sub", var("n"), lit_int(1)))))
    program = let("is_even", is_even, let("is_odd", is_odd, call(var("is_even"), lit_int(7))))
    assert run(program) == {'type': 'Bool', 'value': False}

  def test_not_callable(self, run, capsys):
    with pytest.raises(NotCallable) as exc_info:
      run(call(lit_int(5)))
    assert exc_info.value.type_name == "Int"
    assert capsys.readouterr().out == ""

  def test_wrong_arity_before_body_or_arguments(self, run, capsys):
    program = call(fn(["a"], print_(lit_str("body"))), print_(lit_int(1)), print_(lit_int(2)))
    with pytest.raises(WrongArity) as exc_info:
      run(program)
    assert (exc_info.value.expected, exc_info.value.got) == (1, 2)
    assert capsys.readouterr().out == ""


class TestTuples:
  """Pairs and their projections"""

  def test_first_and_second(self, run):
    pair = tuple_(lit_int(1), lit_str("b"))
    assert run(first(pair)) == {'type': 'Int', 'value': 1}
    assert run(second(pair)) == {'type': 'Str', 'value': 'b'}

  def test_projection_of_non_tuple(self, run):
    with pytest.raises(NotATuple) as exc_info:
      run(second(lit_int(3)))
    assert exc_info.value.projection == "Second"


class TestShortCircuit:
  """And/Or return the operand that decided the result"""

  def test_and_stops_on_false(self, run, capsys):
    result = run(binary("And", lit_bool(False), print_(lit_int(1))))
    assert result == {'type': 'Bool', 'value': False}
    assert capsys.readouterr().out == ""

  def test_and_returns_rhs(self, run):
    assert run(binary("And", lit_int(0), lit_str("x"))) == {'type': 'Str', 'value': 'x'}

  def test_or_returns_truthy_lhs(self, run, capsys):
    assert run(binary("Or", lit_int(0), print_(lit_int(1)))) == {'type': 'Int', 'value': 0}
    assert capsys.readouterr().out == ""

  def test_or_falls_through(self, run):
    assert run(binary("Or", lit_bool(False), lit_bool(True)))['value'] is True


class TestErrors:
  """Fail-fast error propagation"""

  def test_division_by_zero(self, run):
    with pytest.raises(DivisionByZero):
      run(binary("Div", lit_int(1), lit_int(0)))

  def test_type_mismatch(self, run):
    with pytest.raises(TypeMismatch):
      run(binary("Lt", lit_int(1), lit_str("a")))

  def test_output_before_error_is_kept(self, run, capsys):
    with pytest.raises(UnboundVariable):
      run(seq(print_(lit_str("before")), var("missing")))
    assert capsys.readouterr().out == "before\n"

  def test_unknown_node_kind(self):
    with pytest.raises(UnknownNodeKind) as exc_info:
      eval_ast({"kind": "While"}, make_runtime_env())
    assert exc_info.value.node_kind == "dict"

  def test_error_gets_innermost_location(self):
    node = Var("ghost", Location(4, 9, "prog.rinha"))
    with pytest.raises(UnboundVariable) as exc_info:
      eval_ast(node, make_runtime_env())
    assert exc_info.value.location == Location(4, 9, "prog.rinha")

  def test_stack_exhausted(self):
    interpreter = create_interpreter(max_depth=50)
    with pytest.raises(StackExhausted) as exc_info:
      interpreter.interpret(decode_node(fib_program(30)))
    assert exc_info.value.limit == 50

  def test_depth_counter_unwinds(self):
    context = make_execution_context(100)
    eval_ast(decode_node(fib_program(5)), make_runtime_env(), context=context)
    assert context['depth'] == 0


class TestProgram:
  """Program-level entry points"""

  def test_every_node_kind_has_an_evaluator(self):
    assert set(NODE_EVALUATORS) == set(NODE_KINDS.values())

  def test_eval_program_with_existing_env(self):
    env = make_runtime_env()
    env_define(env, "n", {'type': 'Int', 'value': 4})
    assert eval_program(decode_node(binary("Mul", var("n"), var("n"))), env=env)['value'] == 16

  def test_each_run_starts_empty(self, interpreter):
    interpreter.interpret(decode_node(let("x", lit_int(1), var("x"))))
    with pytest.raises(UnboundVariable):
      interpreter.interpret(decode_node(var("x")))
