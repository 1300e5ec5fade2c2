"""Command-line entrypoints for crnsim."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Tuple

import typer

from .examples import ExampleSetup, get_example, list_available_networks
from .network import ReactionNetwork
from .parser import reaction_network
from .problems import JumpProblem, ODEProblem, SDEProblem
from .report import ReportOptions, format_network_report, format_solution_summary
from .solve import SDE_METHODS, SSA_METHODS, TAU_LEAPING_METHODS, solve
from .tutorial import check_tutorial, write_notebook

app = typer.Typer(add_completion=False, help="Build, inspect and simulate reaction networks.")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log solver progress.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_network(source: str, parameters: Optional[str]) -> Tuple[ReactionNetwork, Optional[ExampleSetup]]:
    if source in list_available_networks():
        return get_example(source)
    path = Path(source)
    if not path.is_file():
        raise typer.BadParameter(
            f"'{source}' is neither a built-in example ({', '.join(list_available_networks())}) nor a file"
        )
    return reaction_network(path.read_text(encoding="utf-8"), parameters=parameters, name=path.stem), None


def _make_problem(network: ReactionNetwork, method: str, u0: Any, tspan: Any, p: Any, seed: Optional[int]):
    name = method.lower()
    if name in SSA_METHODS or name in TAU_LEAPING_METHODS:
        return JumpProblem(network, u0, tspan, p, seed=seed)
    if name in SDE_METHODS:
        return SDEProblem(network, u0, tspan, p, seed=seed)
    return ODEProblem(network, u0, tspan, p)


def _solver_options(method: str, dt: Optional[float], saveat: Optional[float]) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    name = method.lower()
    if saveat is not None:
        options["saveat"] = saveat
    if name in TAU_LEAPING_METHODS or name in SDE_METHODS:
        if dt is None:
            raise typer.BadParameter(f"method '{method}' needs --dt")
        options["dt"] = dt
    return options


def _emit(payload: Dict[str, Any], output: Optional[Path]) -> None:
    json_output = json.dumps(payload, indent=2)
    if output:
        output.write_text(json_output, encoding="utf-8")
        typer.echo(f"Wrote {output}")
    else:
        typer.echo(json_output)


@app.command("list")
def list_examples() -> None:
    """List the built-in example networks."""
    for name, desc in list_available_networks().items():
        typer.echo(f"{name}: {desc}")


@app.command()
def inspect(
    source: Annotated[str, typer.Argument(help="Built-in example name or file with reactions.")],
    parameters: Annotated[
        Optional[str], typer.Option(help="Parameter order for a reactions file, e.g. 'k1 k2'.")
    ] = None,
    latex: Annotated[bool, typer.Option(help="Print the ODEs as LaTeX.")] = False,
    jacobian: Annotated[bool, typer.Option(help="Include the Jacobians.")] = False,
) -> None:
    """Print species, parameters, reactions and ODEs of a network."""
    network, _setup = _load_network(source, parameters)
    options = ReportOptions(include_jacobian=jacobian, include_parameter_jacobian=jacobian)
    typer.echo(format_network_report(network, options=options))
    if latex:
        typer.echo(network.to_latex())


@app.command()
def simulate(
    source: Annotated[str, typer.Argument(help="Built-in example name.")],
    method: Annotated[str, typer.Option(help="RK45, BDF, ..., ssa, tau_leaping or em.")] = "RK45",
    dt: Annotated[Optional[float], typer.Option(help="Step size for tau_leaping / em.")] = None,
    saveat: Annotated[Optional[float], typer.Option(help="Spacing of saved time points.")] = None,
    tmax: Annotated[Optional[float], typer.Option(help="Override the end of the time span.")] = None,
    seed: Annotated[Optional[int], typer.Option(help="Random seed for stochastic methods.")] = None,
    output: Annotated[Optional[Path], typer.Option(help="Path to save output JSON.")] = None,
    plot: Annotated[Optional[Path], typer.Option(help="Path to save a PNG plot.")] = None,
) -> None:
    """Simulate a built-in example with its demonstration values."""
    if source not in list_available_networks():
        raise typer.BadParameter(f"Unknown example '{source}'. Known: {', '.join(list_available_networks())}")
    network, setup = get_example(source)

    tspan = (setup.tspan[0], tmax if tmax is not None else setup.tspan[1])
    dt = dt if dt is not None else setup.dt
    saveat = saveat if saveat is not None else setup.saveat

    problem = _make_problem(network, method, setup.u0, tspan, setup.p, seed)
    sol = solve(problem, method, **_solver_options(method, dt, saveat))
    typer.echo(format_solution_summary(sol), err=True)

    if plot is not None:
        from .plotting import plot_solution, save_figure

        save_figure(plot_solution(sol, title=f"{network.name} ({sol.method})"), plot)
    _emit(sol.as_dict(), output)


@app.command()
def run(
    config_file: Annotated[Path, typer.Argument(help="Path to JSON configuration file.")],
    output: Annotated[Optional[Path], typer.Option(help="Path to save output JSON.")] = None,
) -> None:
    """Run a simulation described by a config file.

    The file holds either ``"example"`` (a built-in name) or ``"reactions"``
    (the reaction notation, with optional ``"parameters"``), plus ``"u0"``,
    ``"p"``, ``"tspan"``, ``"method"`` and solver ``"options"``. Missing
    values fall back to the example's demonstration setup.
    """
    with open(config_file, "r") as f:
        config = json.load(f)

    setup: Optional[ExampleSetup] = None
    if "example" in config:
        network, setup = get_example(config["example"])
    elif "reactions" in config:
        network = reaction_network(
            config["reactions"], parameters=config.get("parameters"), name=config.get("name")
        )
    else:
        raise typer.BadParameter("config needs either 'example' or 'reactions'")

    def setting(key: str) -> Any:
        if key in config:
            return config[key]
        if setup is not None:
            return getattr(setup, key)
        raise typer.BadParameter(f"config is missing '{key}'")

    method = config.get("method", "RK45")
    options: Dict[str, Any] = dict(config.get("options", {}))
    seed = options.pop("seed", None)
    if setup is not None and method.lower() in TAU_LEAPING_METHODS | SDE_METHODS:
        options.setdefault("dt", setup.dt)

    problem = _make_problem(network, method, setting("u0"), setting("tspan"), setting("p"), seed)
    sol = solve(problem, method, **options)
    _emit(sol.as_dict(), output)


@app.command("check-tutorial")
def check_tutorial_command(
    markdown: Annotated[Path, typer.Argument(help="Markdown tutorial.")] = Path("docs/tutorial.md"),
    notebook: Annotated[Path, typer.Argument(help="Notebook rendering.")] = Path("docs/tutorial.ipynb"),
) -> None:
    """Check that the tutorial and its notebook agree."""
    result = check_tutorial(markdown, notebook)
    typer.echo(f"{result.markdown_blocks} markdown code blocks, {result.notebook_cells} notebook code cells")
    problems: List[Tuple[str, str]] = result.problems()
    for kind, message in problems:
        typer.echo(f"[{kind}] {message}")
    if not result.ok:
        raise typer.Exit(code=1)
    typer.echo("OK")


@app.command("render-notebook")
def render_notebook(
    markdown: Annotated[Path, typer.Argument(help="Markdown tutorial.")] = Path("docs/tutorial.md"),
    notebook: Annotated[Path, typer.Argument(help="Notebook to write.")] = Path("docs/tutorial.ipynb"),
) -> None:
    """Regenerate the notebook rendering from the markdown tutorial."""
    path = write_notebook(markdown, notebook)
    typer.echo(f"Wrote {path}")
