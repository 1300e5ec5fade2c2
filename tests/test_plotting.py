import matplotlib.pyplot as plt
import numpy as np

from crnsim import Solution, plot_solution, save_figure


def make_solution(method):
    return Solution(
        t=np.array([0.0, 1.0, 2.0]),
        u=np.array([[3, 2, 2], [0, 1, 1], [1, 1, 0]]),
        species=["A", "B", "C"],
        method=method,
    )


def test_one_line_per_species():
    ax = plot_solution(make_solution("RK45"))
    assert len(ax.get_lines()) == 3
    assert [t.get_text() for t in ax.get_legend().get_texts()] == ["A", "B", "C"]
    assert ax.get_title() == "RK45"
    assert ax.get_ylabel() == "amount"
    plt.close(ax.figure)


def test_subset_and_existing_axes():
    fig, ax = plt.subplots()
    out = plot_solution(make_solution("ssa"), ["B"], ax=ax, title="B only")
    assert out is ax
    assert len(ax.get_lines()) == 1
    assert ax.get_title() == "B only"
    assert ax.get_ylabel() == "copy number"
    plt.close(fig)


def test_jump_paths_are_drawn_as_steps():
    ax = plot_solution(make_solution("ssa"))
    assert ax.get_lines()[0].get_drawstyle() == "steps-post"
    plt.close(ax.figure)


def test_save_figure(tmp_path):
    ax = plot_solution(make_solution("em"))
    path = save_figure(ax, tmp_path / "trajectory.png")
    assert path.exists()
    assert path.stat().st_size > 0
