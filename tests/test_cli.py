"""Smoke tests for the command line entry points and figure writers."""

import argparse

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

import mmc_compare  # noqa: E402
import mmc_plots  # noqa: E402
import mmc_run  # noqa: E402
from mmc_plots import write_reports  # noqa: E402
from mmcsim import compute_steady_state_metrics, run_queue_simulation  # noqa: E402


def test_run_prints_analytical_and_simulated_metrics(capsys):
    mmc_run.main(
        ["--arrival-mean", "2", "--service-mean", "1", "--servers", "2", "--seed", "1",
         "--customers", "50", "--show-customers"]
    )
    out = capsys.readouterr().out
    assert "Analytical (Erlang-C)" in out
    assert "Simulation" in out
    assert "Server load" in out
    assert "Customers (replication 1)" in out
    assert "customers in queue: 0, in service:" in out


def test_run_reports_unstable_configuration(capsys, caplog):
    mmc_run.main(["--arrival-mean", "0.5", "--service-mean", "1", "--servers", "1", "--seed", "3"])
    out = capsys.readouterr().out
    assert "Analytical metrics unavailable" in out
    assert any("Unstable queue" in r.getMessage() for r in caplog.records)


def test_run_rejects_invalid_parameters():
    with pytest.raises(SystemExit) as excinfo:
        mmc_run.main(["--arrival-mean", "-1", "--service-mean", "1"])
    assert "arrival_mean" in str(excinfo.value)


def test_run_requires_means_or_scenario():
    with pytest.raises(SystemExit):
        mmc_run.main([])


def test_run_scenario_with_replications_and_figures(tmp_path, capsys):
    mmc_run.main(
        ["--scenario", "P", "--customers", "80", "--seed", "5", "--replications", "3",
         "--reports-dir", str(tmp_path)]
    )
    out = capsys.readouterr().out
    assert "Averages by priority" in out
    assert (tmp_path / "priority_averages.png").exists()
    assert (tmp_path / "analytical_vs_sim.png").exists()


def test_write_reports_without_priority(tmp_path):
    result = run_queue_simulation(0.5, 1.0, 2, False, 40, seed=2)
    theory = compute_steady_state_metrics(0.5, 1.0, 2)
    written = write_reports(result, tmp_path / "figs", theory=theory)
    names = {p.name for p in written}
    assert names == {
        "wait_time.png",
        "response_time.png",
        "turnaround_time.png",
        "service_time.png",
        "server_load.png",
        "analytical_vs_sim.png",
    }
    assert all(p.exists() for p in written)


def test_write_reports_plots_replication_means_with_errors(tmp_path, monkeypatch):
    captured = {}
    original = mmc_plots.plot_bar_comparison

    def spy(theory, sim, out, errors=None):
        captured["sim"] = dict(sim)
        captured["errors"] = errors
        original(theory, sim, out, errors=errors)

    monkeypatch.setattr(mmc_plots, "plot_bar_comparison", spy)
    result = run_queue_simulation(0.5, 1.0, 2, False, 40, seed=2)
    theory = compute_steady_state_metrics(0.5, 1.0, 2)
    means = {"lq": 0.1, "ls": 0.6, "wq": 0.2, "ws": 1.2}
    errors = {"lq": 0.01, "ls": 0.02, "wq": 0.03, "ws": 0.04}
    written = write_reports(result, tmp_path, theory=theory, sim_means=means, errors=errors)
    assert (tmp_path / "analytical_vs_sim.png") in written
    assert captured["sim"] == means
    assert captured["errors"] == [0.01, 0.02, 0.03, 0.04]


def test_parse_c_list():
    assert mmc_compare.parse_c_list("3, 1,2,3") == [1, 2, 3]
    with pytest.raises(argparse.ArgumentTypeError):
        mmc_compare.parse_c_list("0")


def test_compare_sweep_prints_summary(tmp_path, capsys):
    mmc_compare.main(
        ["--arrival-mean", "1", "--service-mean", "1.5", "--c-list", "1,2,3",
         "--customers", "200", "--replications", "3", "--reports-dir", str(tmp_path)]
    )
    out = capsys.readouterr().out
    assert "waited_fraction_mean" in out
    assert (tmp_path / "metrics_vs_c.png").exists()
