"""Phi functions.

This module provides dense evaluation of the phi functions used by
exponential integrators, defined by

    phi_0(z) = exp(z),    phi_k(z) = (phi_{k-1}(z) - 1/(k-1)!) / z.

The recurrence is numerically unstable for small |z|. Instead, the
phi functions are read off the exponential of an augmented matrix
(Sidje, R. B. (1998). Expokit: a software package for computing matrix
exponentials. ACM Transactions on Mathematical Software, 24(1),
130-156. Theorem 1).
"""

import numpy as np
from scipy.linalg import expm

from expokrylov.primitives.scratch import (
    check_castable,
    check_phi_matrix_cache,
    check_shape,
    phi_matrix_cache,
)


def scalar_phi(z, k, cache=None):
    """Scalar phi functions of all orders up to `k`.

    Parameters
    ----------
    z : float or complex
        Argument of the phi functions.
    k : int
        Highest order, ``k >= 0``.
    cache : ndarray, optional
        Work array of shape ``(k + 1, k + 1)``.

    Returns
    -------
    ndarray
        Array ``[phi_0(z), phi_1(z), ..., phi_k(z)]`` of length ``k + 1``.

    Raises
    ------
    ValueError
        If `k` is negative, or `cache` has the wrong shape or is real
        while `z` is complex.
    """
    if k < 0:
        raise ValueError(f"Order k must be non-negative, got {k}.")

    if cache is None:
        cache = np.zeros((k + 1, k + 1), dtype=np.result_type(z, np.float64))
    else:
        check_shape(cache, (k + 1, k + 1), "cache")
        check_castable(np.result_type(z), cache, "cache")
        cache.fill(0)

    cache[0, 0] = z
    superdiagonal = np.arange(k)
    cache[superdiagonal, superdiagonal + 1] = 1

    P = expm(cache)
    return P[0, :]


def dense_phi_matrix_vector(A, v, k, out=None, cache=None):
    """Matrix-phi-vector products for a small, dense matrix.

    Computes ``[phi_0(A) v, phi_1(A) v, ..., phi_k(A) v]`` from the
    exponential of the ``(n + k) x (n + k)`` matrix

        [[A, v, 0],
         [0, 0, I],
         [0, 0, 0]],

    whose top-right ``n x k`` block holds ``phi_1(A) v, ..., phi_k(A) v``.

    Parameters
    ----------
    A : array-like
        Square matrix of shape ``(n, n)``.
    v : array-like
        Vector of length ``n``.
    k : int
        Highest order, ``k >= 1``.
    out : ndarray, optional
        Output array of shape ``(n, k + 1)``.
    cache : ndarray, optional
        Work array of shape ``(n + k, n + k)``.

    Returns
    -------
    ndarray
        Array of shape ``(n, k + 1)`` whose column ``j`` is
        ``phi_j(A) v``.

    Raises
    ------
    ValueError
        If `k` < 1 or the shapes of `A`, `v`, `out` and `cache` do not
        agree. Also raised if `out` or `cache` is real while `A` or
        `v` is complex.
    """
    A = np.asarray(A)
    v = np.asarray(v)

    if k < 1:
        raise ValueError(f"Order k must be at least 1, got {k}.")
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"Dimension mismatch: A must be square, got shape {A.shape}.")
    n = A.shape[0]
    check_shape(v, (n,), "v")
    dtype = np.result_type(A, v)

    if out is None:
        out = np.empty((n, k + 1), dtype=np.result_type(A, v, np.float64))
    else:
        check_shape(out, (n, k + 1), "out")
        check_castable(dtype, out, "out")

    if cache is None:
        cache = np.zeros((n + k, n + k), dtype=np.result_type(A, v, np.float64))
    else:
        check_shape(cache, (n + k, n + k), "cache")
        check_castable(dtype, cache, "cache")
        cache.fill(0)

    cache[:n, :n] = A
    cache[:n, n] = v
    chain = np.arange(n, n + k - 1)
    cache[chain, chain + 1] = 1

    P = expm(cache)

    out[:, 0] = P[:n, :n].dot(v)
    out[:, 1:] = P[:n, n : n + k]
    return out


def dense_phi_matrix(A, k, out=None, caches=None):
    """Matrix phi functions of all orders up to `k`.

    Column ``i`` of every ``phi_j(A)`` is obtained by applying
    :func:`dense_phi_matrix_vector` to the ``i``-th standard basis
    vector. This takes ``m`` augmented exponentials and is only suited
    for small matrices.

    Parameters
    ----------
    A : array-like or scalar
        Square matrix of shape ``(m, m)``. A scalar is passed on to
        :func:`scalar_phi`.
    k : int
        Highest order, ``k >= 1``.
    out : list of ndarray, optional
        ``k + 1`` output arrays of shape ``(m, m)``.
    caches : PhiMatrixCache, optional
        Work arrays, see :func:`expokrylov.primitives.scratch.phi_matrix_cache`.

    Returns
    -------
    list of ndarray
        ``[phi_0(A), phi_1(A), ..., phi_k(A)]``. For a scalar `A`, the
        array returned by :func:`scalar_phi`.

    Raises
    ------
    ValueError
        If `k` < 1 or the shapes of `A`, `out` and `caches` do not
        agree.
    """
    if np.ndim(A) == 0:
        return scalar_phi(A, k)

    A = np.asarray(A)
    if k < 1:
        raise ValueError(f"Order k must be at least 1, got {k}.")
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"Dimension mismatch: A must be square, got shape {A.shape}.")
    m = A.shape[0]

    if out is None:
        out = [np.empty((m, m), dtype=np.result_type(A, np.float64)) for _ in range(k + 1)]
    else:
        if len(out) != k + 1:
            raise ValueError(
                f"Dimension mismatch: 'out' has {len(out)} matrices, but {k + 1} were expected."
            )
        for j, P in enumerate(out):
            check_shape(P, (m, m), f"out[{j}]")
            check_castable(A.dtype, P, f"out[{j}]")

    if caches is None:
        caches = phi_matrix_cache(m, k, dtype=np.result_type(A, np.float64))
    else:
        check_phi_matrix_cache(caches, m, k, dtype=A.dtype)
    e, W, C = caches

    for i in range(m):
        e.fill(0)
        e[i] = 1
        dense_phi_matrix_vector(A, e, k, out=W, cache=C)
        for j in range(k + 1):
            out[j][:, i] = W[:, j]

    return out
