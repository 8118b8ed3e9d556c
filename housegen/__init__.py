from housegen.builder import BuildReport, build
from housegen.catalog import ContentCatalog, CorridorVariant, RoomVariant, SocketTemplate, load_catalog, sample_catalog
from housegen.generator import GenerationResult, HouseGenerator, generate
from housegen.graph import EdgeKind, RoomEdge, RoomGraph, RoomNode
from housegen.graph_sampler import MissingArchetype, MissingArchetypeError, Ok, sample, try_sample
from housegen.layout_embedder import Layout, PlacedRoom, Rect, embed, layout_cost
from housegen.program import ProgramError, ProgramSpec, RoomArchetype, load_program, sample_program
from housegen.scene import Scene

__version__ = "0.1.0"
