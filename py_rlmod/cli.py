"""
Command-line entry point for country generation.

Runs the generator on a synthetic map or on a JSON dump of states and
provinces, prints the validation report and optionally writes the country
records as JSON.
"""

import json
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from pydantic import ValidationError

from .config import BalanceSettings, GeneratorSettings, settings
from .core.countries import CountryTagPool
from .core.generator import GenerationResult, MapGenerator
from .core.provinces import Province, State
from .core.synthetic import SyntheticMap, generate_synthetic_states
from .errors import RLModError
from .logging_config import configure_logging

logger = structlog.get_logger()


def load_input(path: Path) -> tuple:
    """
    Load states, provinces, ocean clusters and optional tags from JSON.

    Expected layout::

        {"states": [...], "provinces": [...], "ocean_clusters": [[...]], "tags": [...]}
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    states = [State.model_validate(item) for item in data.get("states", [])]
    provinces = [Province.model_validate(item) for item in data.get("provinces", [])]
    ocean_clusters = data.get("ocean_clusters", [])
    tags = data.get("tags")
    return SyntheticMap(states, provinces, ocean_clusters), tags


def format_report(result: GenerationResult) -> str:
    validation = result.validation
    lines = [
        f"Countries: {len(result.countries)}",
        f"Land states assigned: {sum(c.land_state_count for c in result.countries)}",
        f"Unassigned non-land states: {len(result.unassigned)}",
        f"Connected: {validation.is_connected}",
        f"Value std dev: {validation.value_std_dev:.2f}",
        "Country types:",
    ]
    for archetype, count in validation.country_type_distribution.items():
        lines.append(f"  {archetype.value}: {count}")
    if validation.disconnected_countries:
        lines.append("Disconnected: " + ", ".join(validation.disconnected_countries))
    return "\n".join(lines)


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(description="Partition states into balanced countries")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", type=Path, help="JSON file with states and provinces")
    source.add_argument(
        "--synthetic", type=int, default=1000, help="Number of synthetic states (default: 1000)"
    )
    parser.add_argument(
        "--impassable-fraction",
        type=float,
        default=0.1,
        help="Share of synthetic states marked impassable",
    )
    parser.add_argument("--with-ocean", action="store_true", help="Add a sea strip to synthetic maps")
    parser.add_argument("--countries", type=int, default=None, help="Target number of countries")
    parser.add_argument("--seed", type=int, default=settings.random_seed, help="Generation seed")
    parser.add_argument("--value-mean", type=float, default=settings.value_mean)
    parser.add_argument("--value-std-dev", type=float, default=settings.value_std_dev)
    parser.add_argument("--no-balance", action="store_true", help="Skip the value balancing pass")
    parser.add_argument("--output", type=Path, help="Write country records to this JSON file")
    parser.add_argument(
        "--save", action="store_true", help="Write country records to the configured output directory"
    )
    parser.add_argument("--log-level", default=settings.log_level)
    parser.add_argument("--log-format", default=settings.log_format, choices=["console", "json"])
    return parser


def build_settings(args) -> GeneratorSettings:
    """
    Generation settings from process settings and command-line overrides.

    Raises:
        ValidationError: if an override is out of range
    """
    return GeneratorSettings(
        countries_count=(
            settings.countries_count if args.countries is None else args.countries
        ),
        random_seed=args.seed,
        balance=BalanceSettings(
            enabled=not args.no_balance,
            value_mean=args.value_mean,
            value_std_dev=args.value_std_dev,
        ),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_format)

    try:
        generator_settings = build_settings(args)
    except ValidationError as e:
        logger.error("Invalid generation settings", errors=e.error_count())
        print(f"Error: {e}", file=sys.stderr)
        return 2

    tags = None
    if args.input:
        inputs, tags = load_input(args.input)
    else:
        inputs = generate_synthetic_states(
            args.synthetic,
            impassable_fraction=args.impassable_fraction,
            seed=args.seed,
            with_ocean=args.with_ocean,
        )

    generator = MapGenerator(
        inputs.states,
        inputs.provinces,
        inputs.ocean_clusters,
        settings=generator_settings,
        tag_pool=CountryTagPool(tags),
    )

    try:
        result = generator.generate()
    except RLModError as e:
        logger.error("Generation rejected", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(format_report(result))

    if args.output is None and args.save:
        args.output = Path(settings.output_dir) / f"countries_{args.seed}.json"

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        records = [record.model_dump(mode="json") for record in result.to_records()]
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2)
        print(f"Country records saved as: {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
