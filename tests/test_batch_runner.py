from batch_runner import make_runs, run_experiment


def test_make_runs_repeats_product_each_iteration():
    runs = make_runs({"seed": [1, 2, 3], "target_room_count": [8, 12], "max_loops": 1}, iterations=2)

    assert len(runs) == 12
    assert [r[0] for r in runs] == list(range(12))
    assert runs[0] == (0, 0, {"seed": 1, "target_room_count": 8, "max_loops": 1})
    assert runs[6][1] == 1


def test_run_experiment_summary():
    result = run_experiment(0, 0, {"seed": 3, "target_room_count": 8, "corridor_area_share": 0.2}, max_iterations=200)

    assert result["RunId"] == 0
    assert result["seed"] == 3
    assert result["Rooms"] >= 4
    assert result["Doors"] + result["Corridors"] + result["Dropped"] == result["Edges"]
    assert 0.0 <= result["Realised"] <= 100.0
    assert isinstance(result["Connected"], bool)
