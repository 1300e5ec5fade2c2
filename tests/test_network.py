import numpy as np
import pytest
import sympy as sp

from crnsim import (
    Reaction,
    ReactionNetwork,
    ReactionNetworkError,
    birth_death_network,
    michaelis_menten_network,
    reaction_network,
    repressilator_network,
)


def test_birth_death_rhs_and_jacobians():
    net = birth_death_network()
    (X,) = net.x_symbols
    c1, c2, c3 = net.parameters

    assert sp.simplify(net.rhs()[0] - ((c1 - c2) * X + c3)) == 0
    assert sp.simplify(net.jacobian()[0, 0] - (c1 - c2)) == 0
    pJ = net.parameter_jacobian()
    assert pJ.shape == (1, 3)
    assert sp.simplify(pJ - sp.Matrix([[X, -X, 1]])) == sp.zeros(1, 3)


def test_repressilator_rhs_entries():
    net = repressilator_network()
    m1, m2, m3, P1, P2, P3 = net.x_symbols
    alpha, K, n, delta, gamma, beta, mu = net.parameters
    F = net.rhs()

    assert F.shape == (6, 1)
    assert sp.simplify(F[0] - (alpha * K**n / (K**n + P3**n) - delta * m1 + gamma)) == 0
    assert sp.simplify(F[3] - (beta * m1 - mu * P1)) == 0
    assert net.jacobian().shape == (6, 6)
    assert net.parameter_jacobian().shape == (6, 7)
    assert sp.simplify(net.jacobian()[0, 5] - sp.diff(F[0], P3)) == 0


def test_combinatoric_ratelaws():
    net = reaction_network("k, 2A --> B")
    A, B = net.x_symbols
    (k,) = net.parameters
    assert sp.simplify(net.rhs()[0] + k * A**2) == 0
    assert sp.simplify(net.rhs()[1] - k * A**2 / 2) == 0
    assert sp.simplify(net.propensities()[0] - k * A * (A - 1) / 2) == 0

    plain = reaction_network("k, 2A --> B", combinatoric_ratelaws=False)
    A, B = plain.x_symbols
    (k,) = plain.parameters
    assert sp.simplify(plain.rhs()[0] + 2 * k * A**2) == 0


def test_stoichiometric_integrals_are_valid():
    net = michaelis_menten_network()
    S = net.stoichiometric_matrix()
    laws = net.stoichiometric_first_integrals(integer_basis=True)
    assert len(laws) == 2
    for mu in laws:
        assert mu.shape == (1, net.n_species)
        assert (mu * S) == sp.zeros(1, S.cols)


def test_matrices_shapes():
    net = michaelis_menten_network()
    assert net.stoichiometric_matrix().shape == (4, 4)
    assert net.reactant_matrix() - net.product_matrix() == -net.stoichiometric_matrix()
    assert net.stoichiometry_array().dtype == np.int64
    assert net.common_non_reactants() == []


def test_numeric_functions_agree_with_symbolic():
    net = repressilator_network()
    p = np.array([0.5, 40.0, 2.0, 0.01, 0.005, 0.1, 0.02])
    u = np.array([1.0, 2.0, 3.0, 10.0, 20.0, 30.0])
    subs = dict(zip(net.x_symbols, u))
    subs.update(dict(zip(net.parameters, p)))

    f = net.ode_function()(0.0, u, p)
    expected = np.array(net.rhs().subs(subs).evalf(), dtype=float).ravel()
    np.testing.assert_allclose(f, expected, rtol=1e-12)

    J = net.jacobian_function()(0.0, u, p)
    np.testing.assert_allclose(J, np.array(net.jacobian().subs(subs).evalf(), dtype=float), rtol=1e-12)

    pJ = net.parameter_jacobian_function()(0.0, u, p)
    assert pJ.shape == (6, 7)
    np.testing.assert_allclose(
        pJ, np.array(net.parameter_jacobian().subs(subs).evalf(), dtype=float), rtol=1e-12
    )


def test_parameter_jacobian_matches_finite_differences():
    net = birth_death_network()
    u = np.array([7.0])
    p = np.array([1.0, 2.0, 50.0])
    f = net.ode_function()
    pJ = net.parameter_jacobian_function()(0.0, u, p)
    h = 1e-6
    for j in range(3):
        dp = np.zeros(3)
        dp[j] = h
        fd = (f(0.0, u, p + dp) - f(0.0, u, p - dp)) / (2 * h)
        np.testing.assert_allclose(pJ[:, j], fd, rtol=1e-6)


def test_propensity_and_ratelaw_functions():
    net = reaction_network("k, 2A --> B\nq, 0 --> A")
    a = net.propensity_function()(np.array([4, 0]), np.array([2.0, 3.0]))
    np.testing.assert_allclose(a, [2.0 * 4 * 3 / 2, 3.0])
    r = net.ratelaw_function()(np.array([4.0, 0.0]), np.array([2.0, 3.0]))
    np.testing.assert_allclose(r, [2.0 * 16 / 2, 3.0])


def test_network_without_parameters_compiles():
    net = reaction_network("0.5, A --> B")
    assert net.parameters == []
    np.testing.assert_allclose(net.ode_function()(0.0, np.array([2.0, 0.0]), np.array([])), [-1.0, 1.0])
    assert net.parameter_jacobian_function()(0.0, np.array([2.0, 0.0]), np.array([])).shape == (2, 0)


def test_diffusion_matrix():
    net = birth_death_network()
    (X,) = net.x_symbols
    c1, c2, c3 = net.parameters
    G = net.diffusion_matrix()
    assert G.shape == (1, 3)
    assert sp.simplify(G[0, 1] + sp.sqrt(c2 * X)) == 0
    assert sp.simplify(G[0, 2] - sp.sqrt(c3)) == 0


def test_hand_built_rates_are_bound_to_species_symbols():
    k = sp.Symbol("k", positive=True)
    X = sp.Symbol("X")
    net = ReactionNetwork(["X", "Y"], [Reaction((0, 0), (0, 1), k * X)], name="induced")
    assert net.parameter_names == ["k"]
    assert net.x_symbols[0] in net.reactions[0].rate.free_symbols
    assert not net.reactions[0].is_mass_action(net.x_symbols)


def test_validation_errors():
    k = sp.Symbol("k")
    with pytest.raises(ReactionNetworkError):
        ReactionNetwork(["A", "A"], [])
    with pytest.raises(ReactionNetworkError):
        ReactionNetwork(["A"], [Reaction((1, 0), (0, 1), k)])
    with pytest.raises(ReactionNetworkError, match="undeclared"):
        ReactionNetwork(["A"], [Reaction((1,), (0,), k)], parameters=["q"])
    with pytest.raises(ReactionNetworkError):
        ReactionNetwork(["A"], [Reaction((1,), (0,), k)], parameters=["A", "k"])
    with pytest.raises(ReactionNetworkError):
        ReactionNetwork([], [])


def test_index_lookup():
    net = repressilator_network()
    assert net.species_index("P1") == 3
    assert net.parameter_index("mu") == 6
    with pytest.raises(KeyError):
        net.species_index("nope")


def test_latex_export():
    net = birth_death_network()
    tex = net.to_latex()
    assert tex.startswith("\\begin{align}")
    assert "\\frac{dX}{dt}" in tex
    rx = net.reactions_to_latex()
    assert rx.count("\\xrightarrow") == 3
    assert "\\varnothing" in rx


def test_summary_mentions_name_species_and_parameters():
    s = repressilator_network().summary()
    assert s.startswith("Repressilator")
    assert "m1, m2, m3, P1, P2, P3" in s
    assert "alpha, K, n, delta, gamma, beta, mu" in s


def test_inferred_parameter_order_for_hand_built_rates():
    a, b, c = sp.symbols("a b c", positive=True)
    net = ReactionNetwork(
        ["A", "B"],
        [
            Reaction((1, 0), (0, 1), c * b * a),
            Reaction((0, 1), (1, 0), b),
            Reaction((0, 0), (1, 0), sp.Symbol("d", positive=True) + a),
        ],
    )
    assert net.parameter_names == ["a", "b", "c", "d"]

    parsed = reaction_network("c*b*a, A --> B\nb, B --> A")
    assert parsed.parameter_names == ["c", "b", "a"]
