"""Generate a building from the command line.

Usage:
    python -m housegen.run --seed 42
    python -m housegen.run --program house.json --catalog catalog.json --output plan.png
"""

import argparse
import logging
import random
import sys

from housegen.catalog import load_catalog, sample_catalog
from housegen.config import MAX_SEED, configure_logging
from housegen.generator import HouseGenerator
from housegen.graph_sampler import MissingArchetypeError
from housegen.layout_embedder import DEFAULT_MAX_ITERATIONS
from housegen.program import ProgramError, load_program, sample_program

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate a procedural floor plan from a seed.")
    parser.add_argument('--seed', type=int, help="Seed for generation (random if omitted)")
    parser.add_argument('--program', type=str, default=None, help="Program JSON file (sample house if omitted)")
    parser.add_argument('--catalog', type=str, default=None, help="Catalog JSON file (sample catalog if omitted)")
    parser.add_argument('--iterations', type=int, default=DEFAULT_MAX_ITERATIONS,
                        help="Swap refinement iterations")
    parser.add_argument('--plot', action='store_true', help="Show the floor plan")
    parser.add_argument('--output', type=str, default=None, help="Save the floor plan image to this path")
    parser.add_argument('-v', '--verbose', action='store_true', help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.verbose)

    # Use provided seed or a random positive one
    seed = args.seed if args.seed is not None else random.randint(1, MAX_SEED)

    try:
        program = load_program(args.program) if args.program else sample_program()
        catalog = load_catalog(args.catalog) if args.catalog else sample_catalog()
        result = HouseGenerator(program, catalog, seed=seed, max_iterations=args.iterations).generate()
    except (ProgramError, MissingArchetypeError, OSError) as e:
        logger.error("Generation failed: %s", e)
        return 1

    report = result.report
    print(f"Seed {seed}: {len(result.layout.rooms)} rooms, {len(report.door_links)} doors, "
          f"{len(report.corridor_paths)} corridors, {len(report.dropped)} dropped, {report.validation}")

    if args.plot or args.output:
        import matplotlib.pyplot as plt
        from housegen.visualise import plot_layout

        ax = plot_layout(result.layout, report, title=f"Floor plan (seed {seed})")
        if args.output:
            ax.figure.savefig(args.output, dpi=150)
        if args.plot:
            plt.show()
    return 0


if __name__ == "__main__":
    sys.exit(main())
