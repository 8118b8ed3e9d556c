import matplotlib.patches as patches
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection

from housegen.layout_embedder import Layout

# Room fill colours by archetype; anything else falls back to the default cycle.
COLOR_MAPPING = {
    "Foyer": "#1f77b4",
    "Living": "#2ca02c",
    "Kitchen": "#ff7f0e",
    "Bathroom": "#17becf",
    "Bedroom": "#9467bd",
    "Corridor": "grey",
    "Door": "#d62728",
}


def draw_layout(ax, layout: Layout, report=None, show_labels=True):
    """Draw rooms (and, given a build report, corridors and doors) in cell units.

    Returns:
        The list of room patches added, in layout order.
    """
    palette = plt.rcParams["axes.prop_cycle"].by_key().get("color", ["#cccccc"])
    room_patches = []
    for i, (node_id, placed) in enumerate(layout.rooms.items()):
        r = placed.rect
        colour = COLOR_MAPPING.get(placed.node.archetype_id, palette[i % len(palette)])
        rect = patches.Rectangle((r.x, r.y), r.width, r.height,
                                 edgecolor='black', facecolor=colour, alpha=0.5)
        ax.add_patch(rect)
        room_patches.append(rect)
        if show_labels:
            cx, cy = r.center
            ax.text(cx, cy, f"{placed.node.archetype_id}\n#{node_id}", ha='center', va='center', fontsize=7)

    if report is not None:
        for x, y in sorted(report.corridor_cells):
            ax.add_patch(patches.Rectangle((x, y), 1, 1, facecolor=COLOR_MAPPING["Corridor"],
                                           edgecolor='none', alpha=0.6))

        # Door links as short segments between room centres, in cell units.
        segments = []
        for link in report.door_links:
            segments.append([layout.rect(link.a).center, layout.rect(link.b).center])
        if segments:
            ax.add_collection(LineCollection(segments, colors=COLOR_MAPPING["Door"], linewidths=1.5))

    ax.autoscale()
    ax.set_aspect('equal')
    return room_patches


def plot_layout(layout: Layout, report=None, ax=None, title="Generated Floor Plan"):
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))
    draw_layout(ax, layout, report)
    ax.set_xlabel('X (cells)')
    ax.set_ylabel('Y (cells)')
    ax.set_title(title)
    return ax
