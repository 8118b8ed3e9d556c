from typing import Iterable, List, Optional, Set, Tuple

import numpy as np

from housegen.layout_embedder import Layout, Rect

GRID_MARGIN = 2

Cell = Tuple[int, int]

# Neighbour order used everywhere a deterministic walk over the grid is needed.
DIRECTIONS: Tuple[Cell, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


class GridSpace:
    """Occupancy grids for placed rooms and routed corridors.

    The grid covers the bounding box of the layout padded by a margin of free
    cells, so corridors can run around the outside of the building. Cells are
    addressed in layout coordinates; the arrays are indexed as [y, x] like any
    other image-shaped grid.
    """

    def __init__(self, bounds: Tuple[int, int, int, int], cell_size: Tuple[float, float] = (0.5, 0.5),
                 margin: int = GRID_MARGIN) -> None:
        """
        Args:
            bounds: (min_x, min_y, max_x, max_y) of the layout in cells
            cell_size: World size of one cell in meters
            margin: Free cells added on every side
        """
        min_x, min_y, max_x, max_y = bounds
        self.cell_size = (float(cell_size[0]), float(cell_size[1]))
        self.origin = (min_x - margin, min_y - margin)
        self.num_cells_x = (max_x - min_x) + 2 * margin
        self.num_cells_y = (max_y - min_y) + 2 * margin
        # -1 marks a free cell, otherwise the id of the room covering it.
        self.room_grid = np.full((self.num_cells_y, self.num_cells_x), -1, dtype=np.int32)
        self.corridor_grid = np.zeros((self.num_cells_y, self.num_cells_x), dtype=bool)

    @classmethod
    def from_layout(cls, layout: Layout, margin: int = GRID_MARGIN) -> "GridSpace":
        rects = [p.rect for p in layout.rooms.values()]
        if rects:
            bounds = (min(r.x for r in rects), min(r.y for r in rects),
                      max(r.x_max for r in rects), max(r.y_max for r in rects))
        else:
            bounds = (0, 0, 0, 0)
        return cls(bounds, layout.cell_size, margin)

    def _index(self, cell: Cell) -> Tuple[int, int]:
        return cell[1] - self.origin[1], cell[0] - self.origin[0]

    def in_bounds(self, cell: Cell) -> bool:
        row, col = self._index(cell)
        return 0 <= row < self.num_cells_y and 0 <= col < self.num_cells_x

    def mark_room(self, node_id: int, rect: Rect) -> None:
        row0, col0 = self._index((rect.x, rect.y))
        self.room_grid[row0:row0 + rect.height, col0:col0 + rect.width] = node_id

    def room_at(self, cell: Cell) -> Optional[int]:
        if not self.in_bounds(cell):
            return None
        value = int(self.room_grid[self._index(cell)])
        return None if value < 0 else value

    def is_room(self, cell: Cell) -> bool:
        return self.room_at(cell) is not None

    def is_free(self, cell: Cell) -> bool:
        """In bounds and not covered by a room. Corridor cells count as free."""
        return self.in_bounds(cell) and not self.is_room(cell)

    def is_corridor(self, cell: Cell) -> bool:
        return self.in_bounds(cell) and bool(self.corridor_grid[self._index(cell)])

    def mark_corridor(self, cell: Cell) -> bool:
        """Mark a corridor cell. Returns False if it was already marked."""
        idx = self._index(cell)
        if self.corridor_grid[idx]:
            return False
        self.corridor_grid[idx] = True
        return True

    def corridor_cells(self) -> Set[Cell]:
        rows, cols = np.nonzero(self.corridor_grid)
        return {(int(c) + self.origin[0], int(r) + self.origin[1]) for r, c in zip(rows, cols)}

    def neighbours(self, cell: Cell) -> Iterable[Cell]:
        for dx, dy in DIRECTIONS:
            yield cell[0] + dx, cell[1] + dy

    def cell_to_world(self, cell: Tuple[float, float]) -> Tuple[float, float]:
        """World position of a cell's minimum corner."""
        return cell[0] * self.cell_size[0], cell[1] * self.cell_size[1]

    def cell_center_world(self, cell: Cell) -> Tuple[float, float]:
        return (cell[0] + 0.5) * self.cell_size[0], (cell[1] + 0.5) * self.cell_size[1]


def border_cells(rect: Rect) -> List[Tuple[Cell, Cell]]:
    """Cells directly outside each side of ``rect``, with their outward direction.

    Corners are excluded. Order: bottom, top, left, right.
    """
    cells: List[Tuple[Cell, Cell]] = []
    for x in range(rect.x, rect.x_max):
        cells.append(((x, rect.y - 1), (0, -1)))
    for x in range(rect.x, rect.x_max):
        cells.append(((x, rect.y_max), (0, 1)))
    for y in range(rect.y, rect.y_max):
        cells.append(((rect.x - 1, y), (-1, 0)))
    for y in range(rect.y, rect.y_max):
        cells.append(((rect.x_max, y), (1, 0)))
    return cells
