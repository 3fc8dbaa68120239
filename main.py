"""
Rinha Interpreter - Main Entry Point
Evaluates a pre-parsed Rinha program stored as a JSON AST
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from decoding import create_decoder
from error_handling import RinhaError, format_diagnostic
from interpreter import create_interpreter, create_debug_interpreter, DEFAULT_MAX_DEPTH
from nodes import pretty_print_node


logger = logging.getLogger("Rinha")

DEFAULT_SCRIPT = "source.rinha.json"
VERSION = "0.1.0"

# Python frames spent per nested evaluation step, with room for argument comprehensions
FRAMES_PER_LEVEL = 4


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='rinha',
      description='Rinha tree-walking interpreter for JSON-encoded ASTs',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s                          # Run ./source.rinha.json
  %(prog)s fib.rinha.json           # Run a program
  %(prog)s --decode fib.rinha.json  # Show the decoded tree
  %(prog)s --debug fib.rinha.json   # Trace evaluation on stderr
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      default=DEFAULT_SCRIPT,
      help=f'JSON AST file to execute (default: {DEFAULT_SCRIPT})'
  )

  parser.add_argument(
      '--decode',
      action='store_true',
      help='Decode the file and print the node tree instead of running it'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Log evaluation steps to stderr and show source context on errors'
  )

  parser.add_argument(
      '--max-depth',
      type=int,
      default=DEFAULT_MAX_DEPTH,
      help=f'Maximum nesting of evaluation steps (default: {DEFAULT_MAX_DEPTH})'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=f'rinha v{VERSION}'
  )

  return parser


def configure_logging(debug: bool = False) -> None:
  """Send log records to stderr so stdout carries only program output"""
  logging.basicConfig(
      level=logging.DEBUG if debug else logging.WARNING,
      stream=sys.stderr,
      format='%(levelname)s %(name)s: %(message)s',
      force=True
  )


def ensure_recursion_limit(max_depth: int) -> None:
  """Raise the host recursion limit so max_depth is reached before Python's own limit"""
  wanted = max_depth * FRAMES_PER_LEVEL + 1000
  if sys.getrecursionlimit() < wanted:
    sys.setrecursionlimit(wanted)


def load_source_text(error: RinhaError, script_path: str) -> Optional[str]:
  """Read the .rinha source an error location points at, when it can be found"""
  location = getattr(error, 'location', None)
  if location is None or not location.filename:
    return None

  candidates = [Path(script_path).parent / location.filename, Path(location.filename)]
  for candidate in candidates:
    try:
      return candidate.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError):
      continue
  return None


def report_error(error: RinhaError, script_path: str, debug: bool = False) -> None:
  """Write the diagnostic for a failed run to stderr"""
  source_text = load_source_text(error, script_path)
  print(format_diagnostic(error, source_text, show_context=debug), file=sys.stderr)


def decode_file(script_path: str, debug: bool = False) -> None:
  """Decode a program file and show its node tree"""
  decoder = create_decoder(debug)
  try:
    program = decoder.decode_file(script_path)
  except RinhaError as e:
    report_error(e, script_path, debug)
    sys.exit(1)

  print(f"Program {program.name or script_path}")
  print(pretty_print_node(program.expression, 1))


def run_script_file(script_path: str, debug: bool = False, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
  """Decode and evaluate a program file"""
  decoder = create_decoder(debug)
  interpreter = create_debug_interpreter(max_depth) if debug else create_interpreter(max_depth=max_depth)

  try:
    program = decoder.decode_file(script_path)
    logger.debug("Decoded program %r", program.name or script_path)

    result = interpreter.interpret(program)
    logger.debug("Program finished with a %s value", result['type'])

  except RinhaError as e:
    sys.stdout.flush()
    report_error(e, script_path, debug)
    sys.exit(1)
  except Exception as e:
    sys.stdout.flush()
    print(f"InternalError: unexpected failure while running '{script_path}': {e}", file=sys.stderr)
    if debug:
      import traceback
      traceback.print_exc()
    sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for the Rinha interpreter"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.max_depth < 1:
    arg_parser.error("--max-depth must be at least 1")

  configure_logging(args.debug)
  ensure_recursion_limit(args.max_depth)

  if args.decode:
    decode_file(args.script, debug=args.debug)
  else:
    run_script_file(args.script, debug=args.debug, max_depth=args.max_depth)


if __name__ == "__main__":
  main()
