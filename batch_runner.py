"""
Batch runner experiments for the house generator.

This script sweeps over:
  - The target room count: 8, 12 and 16
  - The corridor area share: 0.1, 0.2 and 0.3
  - A range of seeds

Each run generates one building and records how many of the sampled
connections were realised as doors or corridors, how many were dropped and
whether every instantiated room ended up reachable. The runtime of each run is
recorded as well.

Usage: Run as a normal python file. For example:
    python batch_runner.py
"""

import time
import pandas as pd
import matplotlib.pyplot as plt
from itertools import product
from housegen.catalog import sample_catalog
from housegen.generator import HouseGenerator
from housegen.program import sample_program
from tqdm.auto import tqdm

# Define the parameter sweep.
params = {
    "seed": list(range(1, 21)),
    "target_room_count": [8, 12, 16],
    "corridor_area_share": [0.1, 0.2, 0.3],
    "max_loops": 1,
    # Add additional parameters here if needed.
}

PROGRAM_KEYS = ("target_room_count", "corridor_area_share", "max_loops")


def run_experiment(run_id, iteration, kwargs, max_iterations=2000):
    """
    Generate a single building for the given parameters.

    Returns:
        dict: A summary of the run including the run id, parameters,
              realised connection counts, connectivity and run time.
    """
    program = sample_program(**{k: kwargs[k] for k in PROGRAM_KEYS if k in kwargs})
    generator = HouseGenerator(program, sample_catalog(), seed=kwargs["seed"], max_iterations=max_iterations)
    start_time = time.time()
    result = generator.generate()
    run_time = time.time() - start_time

    report = result.report
    edges = len(result.graph.edges)
    return {
        "RunId": run_id,
        "Iteration": iteration,
        **kwargs,
        "Rooms": len(result.graph.nodes),
        "Edges": edges,
        "Doors": len(report.door_links),
        "Corridors": len(report.corridor_paths),
        "Deferred": len(report.deferred),
        "Dropped": len(report.dropped),
        "CorridorCells": len(report.corridor_cells),
        "Realised": (len(report.links) / edges * 100) if edges else 100.0,
        "Connected": bool(report.validation and report.validation.ok),
        "RunTime": run_time,
    }


def make_runs(parameters, iterations=1):
    """
    Generate a list of runs given the parameter sweep.

    Each run is represented as a tuple: (run_id, iteration, kwargs)
    """
    runs = []
    run_id = 0
    keys = list(parameters.keys())
    # Build the Cartesian product over parameters once so every iteration sees it.
    values_product = list(product(
        *(parameters[k] if isinstance(parameters[k], list) else [parameters[k]] for k in keys)
    ))
    for iteration in range(iterations):
        for vals in values_product:
            kwargs = dict(zip(keys, vals))
            runs.append((run_id, iteration, kwargs))
            run_id += 1
    return runs


if __name__ == "__main__":
    iterations = 1  # Generation is deterministic, so repetitions only re-measure runtime.
    runs = make_runs(params, iterations=iterations)
    results = []
    # Wrap the loop with tqdm to show a progress bar.
    for run in tqdm(runs, total=len(runs), desc="Generating buildings"):
        result = run_experiment(*run)
        results.append(result.copy())

    # Create a pandas dataframe from the results list of dictionaries.
    df = pd.DataFrame(results)
    summary = df.groupby(["target_room_count", "corridor_area_share"])[["Realised", "Connected", "Dropped"]].mean()
    print(summary)

    # Plot realised connections against target room count, with lines for each corridor share.
    fig, ax = plt.subplots()
    for share in sorted(df['corridor_area_share'].unique()):
        share_df = df[df['corridor_area_share'] == share].groupby('target_room_count')['Realised'].mean()
        ax.plot(share_df.index, share_df.values, label=f"{share:.1f}", marker='o')

    ax.set_xlabel('Target Room Count')
    ax.set_ylabel('Realised Connections (%)')
    ax.set_title('Realised Connections vs Target Room Count')
    ax.legend(title='Corridor Share')
    plt.show()
