"""Krylov propagator test module."""

import numpy as np
import pytest
import scipy.sparse as sp

from expokrylov.math.krylov_expm import krylov_expmv, krylov_phimv
from expokrylov.propagation.propagator import KrylovPropagator


def laplacian(n):
    return sp.diags([1.0, -2.0, 1.0], [-1, 0, 1], shape=(n, n), format="csr")


def test_propagator_matches_functions():
    """Test that the propagator reproduces the one-shot Krylov products."""
    # Arrange.
    n = 60
    A = laplacian(n)
    b = np.sin(np.linspace(0.0, 3 * np.pi, n))
    propagator = KrylovPropagator(A, krylov_dim=20, order=2)

    # Act.
    propagator.update(b)
    results = {t: (propagator.expmv(t).copy(), propagator.phimv(t).copy()) for t in (0.1, 0.4, 1.0)}

    # Assert.
    for t, (w, W) in results.items():
        assert np.allclose(w, krylov_expmv(t, A, b, m=20))
        assert np.allclose(W, krylov_phimv(t, A, b, 2, m=20))


def test_propagator_new_seed_vector():
    """Test passing a new seed vector directly to expmv and phimv."""
    n = 30
    A = laplacian(n)
    b = np.linspace(-1.0, 1.0, n)
    c = np.ones(n)
    propagator = KrylovPropagator(A, krylov_dim=10)
    propagator.update(b)

    w = propagator.expmv(0.5, c)
    W = propagator.phimv(0.5, c)

    assert np.allclose(w, krylov_expmv(0.5, A, c, m=10))
    assert np.allclose(W, krylov_phimv(0.5, A, c, 1, m=10))


def test_propagator_breakdown():
    """Test that an eigenvector seed is reported as happy breakdown."""
    A = np.diag([-1.0, -2.0, -3.0, -4.0])
    propagator = KrylovPropagator(A, krylov_dim=4)

    propagator.update(np.array([0.0, 1.0, 0.0, 0.0]))
    w = propagator.expmv(1.0)

    assert propagator.breakdown
    assert propagator.subspace.dimension == 1
    assert np.allclose(w, [0.0, np.exp(-2.0), 0.0, 0.0])


def test_propagator_requires_subspace():
    """Test that evaluating before any update raises."""
    propagator = KrylovPropagator(laplacian(5))

    assert not propagator.breakdown
    with pytest.raises(ValueError):
        propagator.expmv(1.0)


def test_propagator_settings():
    """Test the settings dataset and its comparison."""
    A = laplacian(12)
    propagator = KrylovPropagator(A, krylov_dim=40, tol=1e-8, order=3)

    assert int(propagator.settings.n) == 12
    assert int(propagator.settings.krylov_dim) == 12
    assert float(propagator.settings.tol) == 1e-8
    assert int(propagator.settings.order) == 3
    assert propagator.settings_match(KrylovPropagator(A, krylov_dim=12, tol=1e-8, order=3).settings)
    assert not propagator.settings_match(KrylovPropagator(A, krylov_dim=12, order=3).settings)


def test_propagator_invalid_settings():
    """Test that invalid settings are rejected."""
    with pytest.raises(ValueError):
        KrylovPropagator(laplacian(5), krylov_dim=0)
    with pytest.raises(ValueError):
        KrylovPropagator(laplacian(5), order=0)
    with pytest.raises(ValueError, match="Dimension mismatch"):
        KrylovPropagator(np.ones((3, 4)))


def test_propagator_complex_seed_vector():
    """Test that a real propagator rejects a complex seed vector."""
    A = np.diag([-1.0, -2.0])
    b = np.array([1j, 0.0])

    with pytest.raises(ValueError, match="Data type mismatch"):
        KrylovPropagator(A, krylov_dim=2).expmv(1.0, b)

    w = KrylovPropagator(A, krylov_dim=2, dtype=complex).expmv(1.0, b)
    assert np.allclose(w, [np.exp(-1.0) * 1j, 0.0])
