import json

from biathlon_core.cli import main

CONFIG = {
    "laps": 2,
    "lapLen": 1000,
    "penaltyLen": 100,
    "firingLines": 1,
    "start": "10:00:00",
    "startDelta": "00:00:30",
}

EVENTS = """\
[09:00:00.000] 1 1
[09:00:01.000] 2 1 10:00:00.000
not an event
[09:59:00.000] 3 1
[10:00:05.000] 4 1
[10:05:00.000] 10 1
[10:10:00.000] 10 1
"""


def _write_inputs(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(CONFIG), encoding="utf-8")
    events_path = tmp_path / "events"
    events_path.write_text(EVENTS, encoding="utf-8")
    return config_path, events_path


def test_main_writes_log_and_results(tmp_path, capsys):
    config_path, events_path = _write_inputs(tmp_path)
    log_path = tmp_path / "output_log.txt"
    results_path = tmp_path / "result_table.txt"

    code = main(
        [
            str(config_path),
            str(events_path),
            "--log-output",
            str(log_path),
            "--results-output",
            str(results_path),
        ]
    )

    assert code == 0
    log_lines = log_path.read_text(encoding="utf-8").splitlines()
    assert log_lines[0] == "[09:00:00.000] The competitor(1) registered"
    assert log_lines[-1] == "[10:10:00.000] The competitor(1) has finished"
    assert results_path.read_text(encoding="utf-8") == (
        "[Finished] 1 00:10:00.000 {00:04:55.000, 3.390} {00:05:00.000, 3.333} "
        "{00:00:00.000, 0.000} 0/0\n"
    )
    out = capsys.readouterr().out
    assert out.startswith("Output Log\n")
    assert "End Output Log\n\nResulting Table\n" in out
    assert out.endswith("End Resulting Table\n")


def test_main_quiet_prints_nothing(tmp_path, capsys):
    config_path, events_path = _write_inputs(tmp_path)
    code = main(
        [
            str(config_path),
            str(events_path),
            "--quiet",
            "--log-output",
            str(tmp_path / "log.txt"),
            "--results-output",
            str(tmp_path / "results.txt"),
        ]
    )
    assert code == 0
    assert capsys.readouterr().out == ""


def test_main_missing_events_file_fails(tmp_path, capsys):
    config_path, _ = _write_inputs(tmp_path)
    code = main([str(config_path), str(tmp_path / "missing"), "--quiet"])
    assert code == 1
    assert "error reading events file" in capsys.readouterr().err


def test_main_bad_config_fails(tmp_path, capsys):
    _, events_path = _write_inputs(tmp_path)
    bad = tmp_path / "bad.json"
    bad.write_text("{}", encoding="utf-8")
    code = main([str(bad), str(events_path), "--quiet"])
    assert code == 1
    assert "error loading configuration" in capsys.readouterr().err
