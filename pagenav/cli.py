"""Command-line interface for describing site models and navigating live sites.

Usage:
    # Dump the declared model as a graph
    pagenav describe --model site.py --output site_graph.json

    # Drive a browser to a state
    pagenav navigate --model site.py --target dashboard --url http://localhost:3000
"""

from __future__ import annotations

import argparse
import asyncio
import importlib.util
import json
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Optional, Sequence

from pagenav.config import DroneConfig, configure_logging, load_config
from pagenav.drone import Drone
from pagenav.errors import NavigationError

logger = logging.getLogger(__name__)


def load_model(path: str) -> ModuleType:
    """Import a site model file.

    A site model is a Python file defining ``build(drone)``, which declares
    states, layers and transitions on the drone it is given.

    Raises:
        FileNotFoundError: The file does not exist
        ValueError: The file defines no callable ``build``
    """
    model_path = Path(path)
    if not model_path.is_file():
        raise FileNotFoundError(f"Site model not found: {model_path}")

    spec = importlib.util.spec_from_file_location(model_path.stem, model_path)
    if spec is None:
        raise ValueError(f"Site model {model_path} is not a Python file")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    if not callable(getattr(module, "build", None)):
        raise ValueError(f"Site model {model_path} must define a build(drone) function")
    return module


def parse_params(pairs: Sequence[str]) -> dict[str, str]:
    params = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f'Expected "key=value", got "{pair}"')
        key, value = pair.split("=", 1)
        params[key.strip()] = value.strip()
    return params


def describe(args: argparse.Namespace) -> int:
    drone = Drone()
    load_model(args.model).build(drone)
    graph_data = drone.export_graph()

    if args.output:
        output_path = Path(args.output)
        with output_path.open("w") as f:
            json.dump(graph_data, f, indent=2)
        logger.info("Graph saved to %s", output_path)
    else:
        json.dump(graph_data, sys.stdout, indent=2)
        sys.stdout.write("\n")

    stats = graph_data["statistics"]
    logger.info("  - States: %d", stats["state_count"])
    logger.info("  - Transitions: %d", stats["transition_count"])
    logger.info("  - Composite states: %d", stats["composite_state_count"])
    return 0


async def _navigate(drone: Drone, target: str, params: dict[str, str], retries: int) -> None:
    await drone.start()
    try:
        await drone.ensure_state(target, params, retries=retries)
        logger.info("Reached state %s", drone.current_state)
    finally:
        await drone.stop()


def navigate(args: argparse.Namespace) -> int:
    config = load_config(args.config) if args.config else DroneConfig()
    config = config.merged(base_url=args.url, retries=args.retries, headless=args.headless)

    drone = Drone(config)
    load_model(args.model).build(drone)
    try:
        asyncio.run(_navigate(drone, args.target, parse_params(args.param), config.retries))
    except NavigationError as e:
        logger.error("Navigation to %s failed: %s", args.target, e)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Model a website as a composite state machine and navigate it with Playwright"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    describe_parser = subparsers.add_parser("describe", help="Export a site model as a graph")
    describe_parser.add_argument("--model", required=True, help="Site model file defining build(drone)")
    describe_parser.add_argument("--output", help="Output JSON file (default: stdout)")
    describe_parser.set_defaults(func=describe)

    navigate_parser = subparsers.add_parser("navigate", help="Drive a browser to a state")
    navigate_parser.add_argument("--model", required=True, help="Site model file defining build(drone)")
    navigate_parser.add_argument("--target", required=True, help="Base state to reach")
    navigate_parser.add_argument("--config", help="Drone config file (YAML or JSON)")
    navigate_parser.add_argument("--url", help="Page to open before navigating")
    navigate_parser.add_argument("--retries", type=int, help="Attempts per transition")
    navigate_parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Parameter passed to predicates and transitions (repeatable)",
    )
    navigate_parser.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run the browser without a window (default: from config)",
    )
    navigate_parser.set_defaults(func=navigate)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
