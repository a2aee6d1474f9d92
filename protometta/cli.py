#!/usr/bin/env python3
"""Command-line interface for protometta."""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .config import InterpreterConfig, get_config, setup_logging
from .core import to_metta
from .integration import MettaIntegration
from .parser import ParseError, parse
from .verify import verify_atoms


def _add_interpreter_args(parser: argparse.ArgumentParser):
    parser.add_argument("--no-stdlib", action="store_true", help="Do not load the standard library")
    parser.add_argument("--max-steps", type=int, default=None, help="Maximum reduction steps")
    parser.add_argument("--trace", action="store_true", help="Log every evaluation step")
    parser.add_argument("--metrics", action="store_true", help="Print evaluation metrics as JSON")


def _make_integration(args) -> MettaIntegration:
    defaults = get_config().interpreter
    config = InterpreterConfig(
        max_reduction_steps=(args.max_steps if args.max_steps is not None
                             else defaults.max_reduction_steps),
        max_depth=defaults.max_depth,
        enable_trace=args.trace,
        default_space_name=defaults.default_space_name,
        load_stdlib=not args.no_stdlib,
    )
    setup_logging("DEBUG" if args.trace else get_config().log_level)
    integration = MettaIntegration(config)
    integration.initialize_backend()
    return integration


def _print_results(integration: MettaIntegration, code: str, show_metrics: bool) -> int:
    try:
        results = integration.run(code)
    except ParseError as e:
        print(f"Error: {e}")
        return 1

    for result in results:
        print(f"=> {to_metta(result)}")
    if show_metrics:
        print(json.dumps(integration.metrics.summary(), indent=2))
    return 0


def run_main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for `protometta run`."""
    parser = argparse.ArgumentParser(description="Run a MeTTa source file")
    parser.add_argument("file", help="MeTTa source file")
    _add_interpreter_args(parser)
    args = parser.parse_args(argv)

    try:
        code = Path(args.file).read_text()
    except FileNotFoundError:
        print(f"Error: File not found: {args.file}")
        return 1

    return _print_results(_make_integration(args), code, args.metrics)


def eval_main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for `protometta eval`."""
    parser = argparse.ArgumentParser(description="Evaluate MeTTa code given on the command line")
    parser.add_argument("code", help="MeTTa code")
    _add_interpreter_args(parser)
    args = parser.parse_args(argv)

    return _print_results(_make_integration(args), args.code, args.metrics)


def check_main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for `protometta check`."""
    parser = argparse.ArgumentParser(description="Statically check a MeTTa source file")
    parser.add_argument("file", help="MeTTa source file")
    parser.add_argument("--max-depth", type=int, default=32, help="Maximum atom nesting depth")
    args = parser.parse_args(argv)

    try:
        atoms = parse(Path(args.file).read_text())
    except FileNotFoundError:
        print(f"Error: File not found: {args.file}")
        return 1
    except ParseError as e:
        print(f"Error: {e}")
        return 1

    is_valid, errors = verify_atoms(atoms, max_depth=args.max_depth)
    for error in errors:
        print(f"  {error}")
    print(f"{args.file}: {len(atoms)} forms, {'OK' if is_valid else f'{len(errors)} problems'}")
    return 0 if is_valid else 1


def repl_main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for `protometta repl`."""
    parser = argparse.ArgumentParser(description="Interactive MeTTa session")
    _add_interpreter_args(parser)
    args = parser.parse_args(argv)

    _make_integration(args).repl()
    return 0


COMMANDS = {
    "run": run_main,
    "eval": eval_main,
    "check": check_main,
    "repl": repl_main,
}


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] not in COMMANDS:
        print(f"Usage: protometta {{{','.join(COMMANDS)}}} [options]")
        return 2
    return COMMANDS[argv[0]](argv[1:])


if __name__ == "__main__":
    sys.exit(main())
