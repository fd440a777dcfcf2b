"""Dense phi function test module."""

import numpy as np
import pytest
from scipy.linalg import expm

from expokrylov.math.phi_functions import (
    dense_phi_matrix,
    dense_phi_matrix_vector,
    scalar_phi,
)
from expokrylov.primitives.scratch import phi_matrix_cache


def well_conditioned_matrix(n, seed=0):
    rng = np.random.default_rng(seed)
    return -2.0 * np.eye(n) + 0.3 * rng.standard_normal((n, n))


@pytest.mark.parametrize("z", [0.0, 1.5, -2.0, 1e-8, 3.0 + 2.0j])
def test_scalar_phi_order_zero_is_exp(z):
    """Test that phi_0 is the exponential."""
    assert scalar_phi(z, 0)[0] == pytest.approx(np.exp(z), rel=1e-13)


def test_scalar_phi_closed_form():
    """Test scalar phi functions against their closed forms."""
    # Arrange.
    z = 0.7
    expected = [
        np.exp(z),
        (np.exp(z) - 1) / z,
        (np.exp(z) - 1 - z) / z**2,
        (np.exp(z) - 1 - z - z**2 / 2) / z**3,
    ]

    # Act.
    phis = scalar_phi(z, 3)

    # Assert.
    assert phis.shape == (4,)
    assert phis == pytest.approx(expected, rel=1e-10)


def test_scalar_phi_small_argument():
    """Test that phi_k(z) tends to 1/k! for small z without cancellation."""
    phis = scalar_phi(1e-10, 3)

    assert phis == pytest.approx([1.0, 1.0, 0.5, 1.0 / 6.0], rel=1e-8)


def test_scalar_phi_reuses_cache():
    """Test that a dirty cache is fully overwritten."""
    cache = np.full((3, 3), 7.0)

    phis = scalar_phi(-0.3, 2, cache=cache)

    assert phis == pytest.approx(scalar_phi(-0.3, 2), rel=1e-14)


def test_scalar_phi_invalid_input():
    """Test that invalid orders and caches are rejected."""
    with pytest.raises(ValueError):
        scalar_phi(1.0, -1)
    with pytest.raises(ValueError, match="Dimension mismatch"):
        scalar_phi(1.0, 2, cache=np.zeros((2, 2)))


def test_dense_phi_matrix_vector_exp_column():
    """Test that the first column is exp(A) v."""
    # Arrange.
    A = well_conditioned_matrix(5)
    v = np.arange(1.0, 6.0)

    # Act.
    W = dense_phi_matrix_vector(A, v, 1)

    # Assert.
    assert W.shape == (5, 2)
    assert np.allclose(W[:, 0], expm(A).dot(v), rtol=1e-12, atol=1e-14)


def test_dense_phi_matrix_vector_higher_orders():
    """Test phi_1 and phi_2 against the recurrence for invertible A."""
    # Arrange.
    A = well_conditioned_matrix(6, seed=1)
    v = np.linspace(-1.0, 1.0, 6)
    expA_v = expm(A).dot(v)
    phi1_v = np.linalg.solve(A, expA_v - v)
    phi2_v = np.linalg.solve(A, phi1_v - v)

    # Act.
    W = dense_phi_matrix_vector(A, v, 2)

    # Assert.
    assert np.allclose(W[:, 1], phi1_v, rtol=1e-10, atol=1e-12)
    assert np.allclose(W[:, 2], phi2_v, rtol=1e-10, atol=1e-12)


def test_dense_phi_matrix_vector_diagonal_scenario():
    """Test phi_0 and phi_1 of diag(1, -1) applied to (1, 1)."""
    A = np.diag([1.0, -1.0])
    v = np.array([1.0, 1.0])

    W = dense_phi_matrix_vector(A, v, 1)

    assert np.allclose(W[:, 0], [np.e, 1 / np.e])
    assert np.allclose(W[:, 1], [np.e - 1, (1 / np.e - 1) / -1])


def test_dense_phi_matrix_vector_uses_buffers():
    """Test that results are written into the supplied buffers."""
    A = well_conditioned_matrix(4, seed=2)
    v = np.ones(4)
    out = np.empty((4, 3))
    cache = np.full((6, 6), np.nan)

    W = dense_phi_matrix_vector(A, v, 2, out=out, cache=cache)

    assert W is out
    assert np.allclose(out, dense_phi_matrix_vector(A, v, 2))


def test_dense_phi_matrix_vector_dimension_mismatch():
    """Test that mismatched inputs raise before touching the output."""
    A = well_conditioned_matrix(4)
    out = np.full((4, 2), 5.0)

    with pytest.raises(ValueError, match="Dimension mismatch"):
        dense_phi_matrix_vector(A, np.ones(3), 1, out=out)
    with pytest.raises(ValueError, match="Dimension mismatch"):
        dense_phi_matrix_vector(A, np.ones(4), 1, out=out, cache=np.zeros((4, 4)))
    with pytest.raises(ValueError, match="Dimension mismatch"):
        dense_phi_matrix_vector(A, np.ones(4), 2, out=out)
    with pytest.raises(ValueError, match="Dimension mismatch"):
        dense_phi_matrix_vector(np.ones((4, 3)), np.ones(4), 1)
    with pytest.raises(ValueError):
        dense_phi_matrix_vector(A, np.ones(4), 0)

    assert np.all(out == 5.0)


def test_dense_phi_matrix_exp():
    """Test that phi_0(A) assembled from basis vectors equals exp(A)."""
    # Arrange.
    A = well_conditioned_matrix(5, seed=3)

    # Act.
    phis = dense_phi_matrix(A, 2)

    # Assert.
    assert len(phis) == 3
    assert np.allclose(phis[0], expm(A), rtol=1e-12, atol=1e-14)
    assert np.allclose(phis[1], np.linalg.solve(A, expm(A) - np.eye(5)), rtol=1e-10, atol=1e-12)


def test_dense_phi_matrix_with_buffers():
    """Test dense_phi_matrix with preallocated output and caches."""
    A = well_conditioned_matrix(3, seed=4)
    out = [np.empty((3, 3)) for _ in range(3)]
    caches = phi_matrix_cache(3, 2)

    phis = dense_phi_matrix(A, 2, out=out, caches=caches)

    assert phis is out
    for expected, actual in zip(dense_phi_matrix(A, 2), phis):
        assert np.allclose(expected, actual)


def test_dense_phi_matrix_invalid_buffers():
    """Test that wrongly sized outputs and caches are rejected."""
    A = well_conditioned_matrix(3)

    with pytest.raises(ValueError, match="Dimension mismatch"):
        dense_phi_matrix(A, 2, out=[np.empty((3, 3)) for _ in range(2)])
    with pytest.raises(ValueError, match="Dimension mismatch"):
        dense_phi_matrix(A, 2, caches=phi_matrix_cache(3, 1))


def test_dense_phi_matrix_scalar_fallback():
    """Test that a scalar argument gives the scalar phi functions."""
    assert dense_phi_matrix(0.5, 2) == pytest.approx(scalar_phi(0.5, 2))


def test_complex_input_real_buffers():
    """Test that real buffers are rejected for complex arguments."""
    A = well_conditioned_matrix(3) + 0.5j * np.eye(3)
    v = np.ones(3)

    with pytest.raises(ValueError, match="Data type mismatch"):
        scalar_phi(1.0 + 2.0j, 2, cache=np.zeros((3, 3)))
    with pytest.raises(ValueError, match="Data type mismatch"):
        dense_phi_matrix_vector(A, v, 2, cache=np.zeros((5, 5)))
    with pytest.raises(ValueError, match="Data type mismatch"):
        dense_phi_matrix_vector(A, v, 2, out=np.zeros((3, 3)))
    with pytest.raises(ValueError, match="Data type mismatch"):
        dense_phi_matrix(A, 2, caches=phi_matrix_cache(3, 2))

    phis = scalar_phi(1.0 + 2.0j, 2, cache=np.zeros((3, 3), dtype=complex))
    assert phis[0] == pytest.approx(np.exp(1.0 + 2.0j))
