"""Krylov matrix exponential and phi-function products.

This module computes exp(t*A) b and phi_k(t*A) b by projecting onto the
Krylov subspace K_m(A, b) built by the Arnoldi process:

    f(t*A) b ~ ||b|| * V_m f(t*H_m) e_1,

where V_m is the orthonormal basis and H_m the Hessenberg projection.
Only the small m x m matrix H_m is exponentiated, so `A` only needs to
support matrix-vector products.
"""

import numpy as np
from scipy.linalg import expm

from expokrylov.math.arnoldi import arnoldi
from expokrylov.math.constants import DEFAULT_BREAKDOWN_TOL, DEFAULT_CAPACITY
from expokrylov.math.phi_functions import dense_phi_matrix_vector
from expokrylov.primitives.operator import as_operator, operator_infinity_norm, operator_shape
from expokrylov.primitives.scratch import (
    check_castable,
    check_min_shape,
    check_phimv_cache,
    check_shape,
    phimv_cache,
)


def _planned_subspace(A, b, m, subspace):
    """Operator size, iteration count and data type Arnoldi will use.

    Lets the one-shot products validate their buffers before `subspace`
    is refilled.
    """
    n = operator_shape(A)[0]
    if m is None:
        m = DEFAULT_CAPACITY if subspace is None else subspace.capacity
    if subspace is None:
        dtype = np.result_type(b, A.dtype, np.float64)
    else:
        dtype = subspace.dtype
    return n, min(m, n), dtype


def krylov_expmv(
    t,
    A,
    b,
    m=None,
    tol=DEFAULT_BREAKDOWN_TOL,
    norm=np.linalg.norm,
    opnorm=operator_infinity_norm,
    subspace=None,
    out=None,
    cache=None,
):
    """Matrix-exponential-vector product exp(t*A) b using Krylov.

    A Krylov subspace is constructed with
    :func:`expokrylov.math.arnoldi.arnoldi` and the exponential is
    evaluated on its Hessenberg matrix. Consult `arnoldi` for `m`,
    `tol`, `norm`, `opnorm` and `subspace`.

    Parameters
    ----------
    t : float or complex
        Time multiplier.
    A : array-like, sparse matrix or LinearOperator
        Square linear operator of shape ``(n, n)``.
    b : array-like
        Vector of length ``n``.
    out : ndarray, optional
        Output vector of length ``n``.
    cache : ndarray, optional
        Square work array of side at least the subspace dimension.

    Returns
    -------
    ndarray
        Approximation to exp(t*A) b.

    Raises
    ------
    ValueError
        If `out` or `cache` does not fit the operator and subspace. The
        buffers are checked before `subspace` is refilled.
    """
    A = as_operator(A)
    b = np.asarray(b)
    n, m_planned, dtype = _planned_subspace(A, b, m, subspace)
    if out is not None:
        check_shape(out, (n,), "out")
        check_castable(np.result_type(dtype, t), out, "out")
    if cache is not None:
        check_min_shape(cache, (m_planned, m_planned), "cache")
        check_castable(np.result_type(dtype, t), cache, "cache")

    subspace = arnoldi(A, b, m=m, tol=tol, norm=norm, opnorm=opnorm, subspace=subspace)
    return expmv_from_subspace(t, subspace, out=out, cache=cache)


def expmv_from_subspace(t, subspace, out=None, cache=None):
    """Matrix-exponential-vector product from a precomputed Krylov subspace.

    Parameters
    ----------
    t : float or complex
        Time multiplier.
    subspace : KrylovSubspace
        Subspace K_m(A, b) populated by Arnoldi.
    out : ndarray, optional
        Output vector of length ``n``.
    cache : ndarray, optional
        Square work array of side at least ``m``. Only the leading
        ``m x m`` block is used, so one cache can serve subspaces of
        varying dimension.

    Returns
    -------
    ndarray
        ``beta * V exp(t*H) e_1``, an approximation to exp(t*A) b.

    Raises
    ------
    ValueError
        If `out` or `cache` has the wrong shape, or is real while the
        subspace or `t` is complex.
    """
    m, beta, V, H = subspace.dimension, subspace.beta, subspace.V, subspace.H

    if out is None:
        out = np.empty(subspace.n, dtype=np.result_type(V, t))
    else:
        check_shape(out, (subspace.n,), "out")
        check_castable(np.result_type(V, t), out, "out")

    if cache is None:
        cache = np.empty((m, m), dtype=np.result_type(H, t))
    else:
        check_min_shape(cache, (m, m), "cache")
        check_castable(np.result_type(H, t), cache, "cache")
        cache = cache[:m, :m]

    if m == 0:
        out.fill(0)
        return out

    np.multiply(t, H, out=cache)
    expH = expm(cache)

    out[:] = V.dot(expH[:, 0])
    out *= beta
    return out


def krylov_phimv(
    t,
    A,
    b,
    k,
    m=None,
    tol=DEFAULT_BREAKDOWN_TOL,
    norm=np.linalg.norm,
    opnorm=operator_infinity_norm,
    subspace=None,
    out=None,
    caches=None,
):
    """Matrix-phi-vector products [phi_0(t*A) b, ..., phi_k(t*A) b] using Krylov.

    A Krylov subspace is constructed with
    :func:`expokrylov.math.arnoldi.arnoldi` and
    :func:`expokrylov.math.phi_functions.dense_phi_matrix_vector` is
    applied to its Hessenberg matrix. Consult `arnoldi` for `m`, `tol`,
    `norm`, `opnorm` and `subspace`.

    Parameters
    ----------
    t : float or complex
        Time multiplier.
    A : array-like, sparse matrix or LinearOperator
        Square linear operator of shape ``(n, n)``.
    b : array-like
        Vector of length ``n``.
    k : int
        Highest order, ``k >= 1``.
    out : ndarray, optional
        Output array of shape ``(n, k + 1)``.
    caches : PhimvCache, optional
        Work arrays, see :func:`expokrylov.primitives.scratch.phimv_cache`.

    Returns
    -------
    ndarray
        Array of shape ``(n, k + 1)`` whose column ``j`` approximates
        phi_j(t*A) b.

    Raises
    ------
    ValueError
        If `k` < 1, or `out` or `caches` does not fit the operator and
        subspace. The buffers are checked before `subspace` is refilled.
    """
    if k < 1:
        raise ValueError(f"Order k must be at least 1, got {k}.")
    A = as_operator(A)
    b = np.asarray(b)
    n, m_planned, dtype = _planned_subspace(A, b, m, subspace)
    if out is not None:
        check_shape(out, (n, k + 1), "out")
        check_castable(np.result_type(dtype, t), out, "out")
    if caches is not None:
        check_phimv_cache(caches, m_planned, k, dtype=np.result_type(dtype, t))

    subspace = arnoldi(A, b, m=m, tol=tol, norm=norm, opnorm=opnorm, subspace=subspace)
    return phimv_from_subspace(t, subspace, k, out=out, caches=caches)


def phimv_from_subspace(t, subspace, k, out=None, caches=None):
    """Matrix-phi-vector products from a precomputed Krylov subspace.

    Parameters
    ----------
    t : float or complex
        Time multiplier.
    subspace : KrylovSubspace
        Subspace K_m(A, b) populated by Arnoldi.
    k : int
        Highest order, ``k >= 1``.
    out : ndarray, optional
        Output array of shape ``(n, k + 1)``.
    caches : PhimvCache, optional
        Work arrays sized for a subspace dimension of at least ``m``.
        Only their leading blocks are used.

    Returns
    -------
    ndarray
        ``beta * V [phi_0(t*H) e_1, ..., phi_k(t*H) e_1]``.

    Raises
    ------
    ValueError
        If `k` < 1, or `out` or `caches` has the wrong shape or is real
        while the subspace or `t` is complex.
    """
    if k < 1:
        raise ValueError(f"Order k must be at least 1, got {k}.")
    m, beta, V, H = subspace.dimension, subspace.beta, subspace.V, subspace.H

    if out is None:
        out = np.empty((subspace.n, k + 1), dtype=np.result_type(V, t))
    else:
        check_shape(out, (subspace.n, k + 1), "out")
        check_castable(np.result_type(V, t), out, "out")

    if caches is None:
        caches = phimv_cache(m, k, dtype=np.result_type(H, t))
    else:
        check_phimv_cache(caches, m, k, dtype=np.result_type(H, t))

    if m == 0:
        out.fill(0)
        return out

    e = caches.unit_vector[:m]
    scaled_H = caches.scaled_projection[:m, :m]
    augmented = caches.augmented[: m + k, : m + k]
    reduced = caches.reduced[:m, : k + 1]

    np.multiply(t, H, out=scaled_H)
    e.fill(0)
    e[0] = 1
    dense_phi_matrix_vector(scaled_H, e, k, out=reduced, cache=augmented)

    out[:] = V.dot(reduced)
    out *= beta
    return out
