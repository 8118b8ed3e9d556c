import logging
from dataclasses import dataclass
from typing import Optional

from housegen.builder import BuildReport, build
from housegen.catalog import ContentCatalog
from housegen.config import DEFAULT_SEED, GRAPH_SEED_OFFSET, LAYOUT_SEED_OFFSET
from housegen.graph import RoomGraph
from housegen.graph_sampler import sample
from housegen.layout_embedder import DEFAULT_MAX_ITERATIONS, Layout, embed
from housegen.program import ProgramSpec
from housegen.scene import Scene
from housegen.validator import Validator

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    seed: int
    graph: RoomGraph
    layout: Layout
    report: BuildReport
    scene: Scene


class HouseGenerator:
    """
    Runs the whole pipeline for one building: sample, embed, build.
    """
    def __init__(
        self,
        program: ProgramSpec,
        catalog: ContentCatalog,
        seed: int = DEFAULT_SEED,
        scene: Optional[Scene] = None,
        validator: Optional[Validator] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        self.program = program
        self.catalog = catalog
        self.seed = int(seed)
        self.scene = scene if scene is not None else Scene()
        self.validator = validator
        self.max_iterations = int(max_iterations)

    def generate(self, seed: Optional[int] = None) -> GenerationResult:
        """Regenerate the building from scratch, replacing previous content.

        Raises:
            MissingArchetypeError: If the program has no foyer.
        """
        if seed is not None:
            self.seed = int(seed)
        self.scene.clear()

        graph = sample(self.program, self.seed + GRAPH_SEED_OFFSET)
        layout = embed(graph, self.program, self.seed + LAYOUT_SEED_OFFSET, self.max_iterations)
        report = build(layout, self.catalog, self.seed, scene=self.scene, validator=self.validator)

        logger.info("Generated building for seed %d: %s", self.seed, report.validation)
        return GenerationResult(seed=self.seed, graph=graph, layout=layout, report=report, scene=self.scene)


def generate(program: ProgramSpec, catalog: ContentCatalog, seed: int = DEFAULT_SEED, **kwargs) -> GenerationResult:
    return HouseGenerator(program, catalog, seed=seed, **kwargs).generate()
