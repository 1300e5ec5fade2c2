import numpy as np
import pytest

from crnsim import JumpProblem, SolverError, birth_death_network, reaction_network, solve
from crnsim.jumps import solve_ssa, solve_tau_leaping


def birth_death_problem(**kwargs):
    return JumpProblem(birth_death_network(), [5], (0.0, 4.0), [1.0, 2.0, 50.0], **kwargs)


def test_ssa_is_reproducible_with_a_seed():
    a = solve(birth_death_problem(seed=11), "ssa")
    b = solve(birth_death_problem(seed=11), "ssa")
    np.testing.assert_array_equal(a.t, b.t)
    np.testing.assert_array_equal(a.u, b.u)


def test_ssa_path_shape():
    sol = solve(birth_death_problem(seed=3))
    assert sol.method == "ssa"
    assert sol.is_discrete
    assert sol.t[0] == 0.0 and sol.t[-1] == 4.0
    assert np.all(np.diff(sol.t) >= 0)
    assert sol.u.dtype == np.int64
    assert sol.u[0, 0] == 5
    assert len(sol) == sol.stats["events"] + 2
    # Every event moves X by exactly one copy.
    assert set(np.abs(np.diff(sol.u[0, :-1])).tolist()) <= {1}


def test_ssa_conserves_total_mass():
    net = reaction_network("(kf, kb), A + B <--> C")
    prob = JumpProblem(net, [30, 20, 0], (0.0, 5.0), [0.05, 0.5], seed=7)
    sol = solve(prob)
    np.testing.assert_array_equal(sol["A"] + sol["C"], 30)
    np.testing.assert_array_equal(sol["B"] + sol["C"], 20)
    assert np.all(sol.u >= 0)


def test_ssa_stops_in_absorbing_state():
    net = reaction_network("k, A --> 0")
    sol = solve_ssa(JumpProblem(net, [3], (0.0, 1000.0), [1.0], seed=0))
    assert sol.stats["events"] == 3
    assert sol["A"].tolist() == [3, 2, 1, 0, 0]
    assert sol.t[-1] == 1000.0


def test_ssa_saveat_samples_the_path():
    sol = solve(birth_death_problem(seed=5), saveat=0.5)
    np.testing.assert_allclose(sol.t, np.arange(0.0, 4.01, 0.5))
    assert sol.u.shape == (1, 9)
    assert sol["X"][0] == 5


def test_ssa_mean_matches_the_ode():
    # Mean of the linear birth-death process: 50 - 45 exp(-t).
    finals = [
        solve(birth_death_problem(), "ssa", seed=s).u[0, -1] for s in range(60)
    ]
    assert np.mean(finals) == pytest.approx(50.0 - 45.0 * np.exp(-4.0), abs=6.0)


def test_ssa_max_steps():
    with pytest.raises(SolverError, match="max_steps"):
        solve(birth_death_problem(seed=1), "ssa", max_steps=10)


def test_ssa_max_steps_allows_exactly_that_many_events():
    net = reaction_network("k, A --> 0")
    prob = JumpProblem(net, [3], (0.0, 1000.0), [1.0], seed=0)
    sol = solve_ssa(prob, max_steps=3)
    assert sol.stats["events"] == 3
    assert sol["A"][-1] == 0
    with pytest.raises(SolverError, match="max_steps=2"):
        solve_ssa(prob, max_steps=2)


def test_tau_leaping_grid_and_reproducibility():
    a = solve(birth_death_problem(seed=2), "tau_leaping", dt=0.01)
    b = solve_tau_leaping(birth_death_problem(), 0.01, seed=2)
    assert a.method == "tau_leaping"
    assert a.t.size == 401
    assert a.t[-1] == 4.0
    np.testing.assert_array_equal(a.u, b.u)
    assert a.stats["dt"] == 0.01


def test_tau_leaping_mean_matches_the_ode():
    finals = [
        solve(birth_death_problem(seed=s), "tau_leaping", dt=0.001).u[0, -1] for s in range(40)
    ]
    assert np.mean(finals) == pytest.approx(50.0 - 45.0 * np.exp(-4.0), abs=6.0)


def test_tau_leaping_clamps_negative_copy_numbers():
    net = reaction_network("k, A --> 0")
    prob = JumpProblem(net, [5], (0.0, 3.0), [10.0], seed=0)
    with pytest.warns(RuntimeWarning, match="clamped"):
        sol = solve(prob, "tau_leaping", dt=1.0)
    assert np.all(sol.u >= 0)
    assert sol.stats["clamped_steps"] >= 1


def test_tau_leaping_needs_positive_dt():
    with pytest.raises(ValueError):
        solve(birth_death_problem(seed=1), "tau_leaping", dt=0.0)
