import numpy as np
import pytest

from crnsim import SDEProblem, SolverError, birth_death_network, reaction_network, solve
from crnsim.sde import solve_cle


def birth_death_problem(**kwargs):
    return SDEProblem(birth_death_network(), [5.0], (0.0, 4.0), [1.0, 2.0, 50.0], **kwargs)


def test_zero_noise_recovers_euler_for_the_odes():
    net = reaction_network("k, A --> 0")
    prob = SDEProblem(net, [10.0], (0.0, 1.0), [1.0], noise_scaling=0.0, seed=0)
    sol = solve(prob, "em", dt=0.001)
    assert sol.method == "em"
    np.testing.assert_allclose(sol["A"], 10.0 * np.exp(-sol.t), rtol=1e-2)


def test_seed_reproducibility():
    a = solve(birth_death_problem(seed=3), dt=0.01)
    b = solve_cle(birth_death_problem(), 0.01, seed=3)
    c = solve(birth_death_problem(seed=4), dt=0.01)
    np.testing.assert_array_equal(a.u, b.u)
    assert not np.array_equal(a.u, c.u)


def test_noise_is_present():
    sol = solve(birth_death_problem(seed=1), dt=0.01)
    assert sol.t.size == 401
    assert not sol.is_discrete
    assert np.std(np.diff(sol["X"][200:])) > 0.1


def test_ensemble_mean_matches_the_ode():
    finals = [solve(birth_death_problem(seed=s), dt=0.005).u[0, -1] for s in range(60)]
    assert np.mean(finals) == pytest.approx(50.0 - 45.0 * np.exp(-4.0), abs=5.0)


def test_positive_keeps_states_nonnegative():
    net = reaction_network("k, A --> 0")
    prob = SDEProblem(net, [1.0], (0.0, 5.0), [2.0], seed=5)
    sol = solve(prob, dt=0.05, positive=True)
    assert np.all(sol.u >= 0.0)


def test_saveat_subsamples():
    sol = solve(birth_death_problem(seed=1), dt=0.01, saveat=1.0)
    assert sol.t.tolist() == [0.0, 1.0, 2.0, 3.0, 4.0]
    assert sol.u.shape == (1, 5)


def test_blow_up_is_reported():
    net = reaction_network("k, 2A --> 3A")
    prob = SDEProblem(net, [10.0], (0.0, 10.0), [1.0], seed=0)
    with pytest.raises(SolverError, match="non-finite"):
        solve(prob, dt=0.5)
