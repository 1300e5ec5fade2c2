import pytest

from crnsim import JumpProblem, ODEProblem, SDEProblem, birth_death_network, solve


@pytest.fixture
def bdp():
    return birth_death_network()


def test_default_methods(bdp):
    args = ([5], (0.0, 1.0), [1.0, 2.0, 50.0])
    assert solve(ODEProblem(bdp, *args)).method == "RK45"
    assert solve(JumpProblem(bdp, *args, seed=0)).method == "ssa"
    assert solve(SDEProblem(bdp, *args, seed=0), dt=0.01).method == "em"


@pytest.mark.parametrize("alias", ["ssa", "direct", "Gillespie"])
def test_ssa_aliases(bdp, alias):
    sol = solve(JumpProblem(bdp, [5], (0.0, 1.0), [1.0, 2.0, 50.0], seed=0), alias)
    assert sol.method == "ssa"


@pytest.mark.parametrize("alias", ["tau_leaping", "tau-leaping", "TauLeaping"])
def test_tau_leaping_aliases(bdp, alias):
    sol = solve(JumpProblem(bdp, [5], (0.0, 1.0), [1.0, 2.0, 50.0], seed=0), alias, dt=0.01)
    assert sol.method == "tau_leaping"


def test_unknown_methods(bdp):
    with pytest.raises(ValueError):
        solve(JumpProblem(bdp, [5], (0.0, 1.0), [1.0, 2.0, 50.0]), "RK45")
    with pytest.raises(ValueError):
        solve(SDEProblem(bdp, [5], (0.0, 1.0), [1.0, 2.0, 50.0]), "milstein", dt=0.1)
    with pytest.raises(ValueError):
        solve(ODEProblem(bdp, [5], (0.0, 1.0), [1.0, 2.0, 50.0]), "ssa")


def test_tau_leaping_requires_dt(bdp):
    with pytest.raises(TypeError):
        solve(JumpProblem(bdp, [5], (0.0, 1.0), [1.0, 2.0, 50.0]), "tau_leaping")


def test_unsupported_problem_type():
    with pytest.raises(TypeError, match="Cannot solve"):
        solve(object())
