"""Configuration defaults for housegen."""

import logging

DEFAULT_SEED = 12345
MAX_SEED = 2**31 - 1

# Added to the building seed; one RNG stream per purpose.
GRAPH_SEED_OFFSET = 0
LAYOUT_SEED_OFFSET = 1
ROOM_VARIANT_SEED_OFFSET = 10
CORRIDOR_VARIANT_SEED_OFFSET = 11

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
