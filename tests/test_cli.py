import json
from pathlib import Path

from typer.testing import CliRunner

from crnsim.cli import app

runner = CliRunner()
DOCS = Path(__file__).resolve().parents[1] / "docs"


def test_list():
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "repressilator:" in result.output
    assert "birth_death:" in result.output


def test_inspect_example():
    result = runner.invoke(app, ["inspect", "repressilator", "--latex"])
    assert result.exit_code == 0
    assert "Species (6): m1, m2, m3, P1, P2, P3" in result.output
    assert "Parameters (7): alpha, K, n, delta, gamma, beta, mu" in result.output
    assert "\\begin{align}" in result.output


def test_inspect_file(tmp_path):
    path = tmp_path / "dimer.txt"
    path.write_text("(kf, kb), 2M <--> D\n", encoding="utf-8")
    result = runner.invoke(app, ["inspect", str(path), "--parameters", "kb kf", "--jacobian"])
    assert result.exit_code == 0
    assert "### dimer" in result.output
    assert "Parameters (2): kb, kf" in result.output
    assert "Jacobian =" in result.output


def test_inspect_unknown_source():
    result = runner.invoke(app, ["inspect", "no_such_network"])
    assert result.exit_code != 0


def test_simulate_ode_to_file(tmp_path):
    out = tmp_path / "sol.json"
    result = runner.invoke(app, ["simulate", "birth_death", "--saveat", "1", "--output", str(out)])
    assert result.exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["method"] == "RK45"
    assert data["t"] == [0.0, 1.0, 2.0, 3.0, 4.0]
    assert len(data["species"]["X"]) == 5


def test_simulate_tau_leaping_with_plot(tmp_path):
    out = tmp_path / "sol.json"
    png = tmp_path / "sol.png"
    result = runner.invoke(
        app,
        [
            "simulate",
            "birth_death",
            "--method",
            "tau_leaping",
            "--seed",
            "3",
            "--output",
            str(out),
            "--plot",
            str(png),
        ],
    )
    assert result.exit_code == 0
    assert png.exists()
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["method"] == "tau_leaping"
    assert len(data["t"]) == 4001


def test_simulate_em_needs_dt(tmp_path):
    result = runner.invoke(app, ["simulate", "repressilator", "--method", "em", "--output", str(tmp_path / "x")])
    assert result.exit_code != 0


def test_run_config(tmp_path):
    config = tmp_path / "config.json"
    config.write_text(
        json.dumps(
            {
                "reactions": "k, A --> B",
                "u0": {"A": 10, "B": 0},
                "p": [1.0],
                "tspan": [0, 2],
                "method": "ssa",
                "options": {"seed": 1, "saveat": 1.0},
            }
        ),
        encoding="utf-8",
    )
    out = tmp_path / "out.json"
    result = runner.invoke(app, ["run", str(config), "--output", str(out)])
    assert result.exit_code == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["method"] == "ssa"
    assert data["t"] == [0.0, 1.0, 2.0]
    assert [a + b for a, b in zip(data["species"]["A"], data["species"]["B"])] == [10, 10, 10]


def test_run_example_config_uses_demo_values(tmp_path):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"example": "michaelis_menten", "method": "BDF"}), encoding="utf-8")
    out = tmp_path / "out.json"
    result = runner.invoke(app, ["run", str(config), "--output", str(out)])
    assert result.exit_code == 0
    assert json.loads(out.read_text(encoding="utf-8"))["species"]["S"][0] == 100.0


def test_check_tutorial_passes_on_shipped_docs():
    result = runner.invoke(app, ["check-tutorial", str(DOCS / "tutorial.md"), str(DOCS / "tutorial.ipynb")])
    assert result.exit_code == 0
    assert "OK" in result.output


def test_render_notebook_then_check(tmp_path):
    md = tmp_path / "t.md"
    md.write_text("Intro\n\n```python\nprint(1)\n```\n", encoding="utf-8")
    nb = tmp_path / "t.ipynb"
    result = runner.invoke(app, ["render-notebook", str(md), str(nb)])
    assert result.exit_code == 0
    assert nb.exists()

    nb.write_text(nb.read_text(encoding="utf-8").replace("print(1)", "print(2)"), encoding="utf-8")
    result = runner.invoke(app, ["check-tutorial", str(md), str(nb)])
    assert result.exit_code == 1
    assert "[mismatch]" in result.output
