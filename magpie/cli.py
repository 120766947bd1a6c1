"""
Magpie CLI - Command-line interface for the engine.

Usage:
    magpie run <definition>         Play a game definition
    magpie validate <definition>    Validate a game definition
    magpie eval <expression>        Evaluate an MXL expression
"""

import argparse
import json
import logging
import sys

from .config import get_settings
from .errors import MagpieError


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Magpie - Tabletop Game Rules Engine",
        prog="magpie",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Play a game definition")
    run_parser.add_argument("definition_file", help="Path to definition JSON file")
    run_parser.add_argument("--players", type=int, help="Number of players")
    run_parser.add_argument("--seed", type=int, help="Shuffle seed")
    run_parser.add_argument("--answers", help="JSON file with a list of scripted answers")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a game definition")
    validate_parser.add_argument("definition_file", help="Path to definition JSON file")

    # Eval command
    eval_parser = subparsers.add_parser("eval", help="Evaluate an expression")
    eval_parser.add_argument("expression", help="MXL expression, with or without a leading '='")
    eval_parser.add_argument("--vars", default="{}", help="JSON object of variables")

    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    commands = {
        "run": cmd_run,
        "validate": cmd_validate,
        "eval": cmd_eval,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)

    try:
        command(args)
    except FileNotFoundError as exc:
        print(f"Error: File not found: {exc.filename}")
        sys.exit(1)
    except MagpieError as exc:
        print(f"Error: {exc}")
        for message in getattr(exc, "errors", []):
            print(f"  - {message}")
        sys.exit(1)


def cmd_run(args):
    """Play a game definition on the console."""
    from .definition import load_definition
    from .session import ConsoleAnswerCollector, GameController, ScriptedAnswerCollector
    from .views import ConsoleViewRenderer

    settings = get_settings()
    if args.seed is not None:
        settings = settings.model_copy(update={"shuffle_seed": args.seed})

    definition = load_definition(args.definition_file)
    num_players = args.players or settings.default_players or definition.player_count.min

    if args.answers:
        with open(args.answers, "r", encoding="utf-8") as f:
            collector = ScriptedAnswerCollector(json.load(f))
    else:
        collector = ConsoleAnswerCollector()

    controller = GameController(
        definition,
        collector,
        view_renderer=ConsoleViewRenderer(),
        settings=settings,
    )

    print(f"Starting {definition.name} with {num_players} player(s)")
    result = controller.play(num_players)
    print(result.summary)


def cmd_validate(args):
    """Validate a game definition and list problems."""
    from .definition import load_definition, validate_definition

    print(f"Validating: {args.definition_file}")
    definition = load_definition(args.definition_file, validate=False)
    result = validate_definition(definition)

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    print("Definition is valid")


def cmd_eval(args):
    """Evaluate one expression and print its value."""
    from .engine_core.expression import evaluate_formula
    from .engine_core.utils import lowercase_key, map_keys_deep, pretty_print
    from .engine_core.variables import from_plain

    try:
        raw_vars = json.loads(args.vars)
    except json.JSONDecodeError as exc:
        print(f"Error: --vars is not valid JSON: {exc}")
        sys.exit(1)
    if not isinstance(raw_vars, dict):
        print("Error: --vars must be a JSON object")
        sys.exit(1)

    variables = from_plain(map_keys_deep(raw_vars, lowercase_key))
    expression = args.expression[1:] if args.expression.startswith("=") else args.expression
    print(pretty_print(evaluate_formula(expression, variables)))


if __name__ == "__main__":
    main()
