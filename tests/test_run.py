import json

from housegen.run import main, parse_args


def test_parse_args_defaults():
    args = parse_args([])
    assert args.seed is None
    assert args.program is None
    assert not args.plot


def test_main_prints_summary(capsys):
    assert main(["--seed", "42", "--iterations", "200"]) == 0
    assert capsys.readouterr().out.startswith("Seed 42:")


def test_main_reports_bad_program(tmp_path):
    path = tmp_path / "house.json"
    path.write_text(json.dumps({"archetypes": [{"id": "Kitchen", "min_count": 1}]}))

    assert main(["--seed", "1", "--program", str(path)]) == 1
    assert main(["--seed", "1", "--program", str(tmp_path / "missing.json")]) == 1
