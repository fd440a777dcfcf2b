"""Arnoldi process.

This module provides the Arnoldi iteration building an orthonormal
basis of the Krylov subspace K_m(A, b) together with the upper
Hessenberg projection of A onto it.
"""

import logging

import numpy as np

from expokrylov.math.constants import DEFAULT_BREAKDOWN_TOL, DEFAULT_CAPACITY
from expokrylov.primitives.krylov_subspace import KrylovSubspace
from expokrylov.primitives.operator import (
    as_operator,
    operator_apply,
    operator_infinity_norm,
    operator_shape,
)
from expokrylov.primitives.scratch import check_castable, check_shape

logger = logging.getLogger(__name__)


def arnoldi(
    A,
    b,
    m=None,
    tol=DEFAULT_BREAKDOWN_TOL,
    norm=np.linalg.norm,
    opnorm=operator_infinity_norm,
    subspace=None,
    cache=None,
):
    """Perform `m` Arnoldi iterations to obtain the Krylov subspace K_m(A, b).

    The ``n x m`` orthonormal basis V and the ``m x m`` upper Hessenberg
    matrix H are related by

        v_1 = b / ||b||,    A v_j = sum_{i=1}^{j+1} h_{ij} v_i,

    for ``j = 1, ..., m - 1``. Each new vector is orthogonalized against
    all previous basis vectors (modified Gram-Schmidt).

    Happy breakdown occurs whenever the norm of a new basis vector falls
    to ``tol * opnorm(A)`` or below. The dimension of the resulting
    subspace is then smaller than `m`, and the projection represents `A`
    exactly on an invariant subspace. This is not an error.

    Parameters
    ----------
    A : array-like, sparse matrix or LinearOperator
        Square linear operator of shape ``(n, n)``.
    b : array-like
        Seed vector of length ``n``.
    m : int, optional
        Number of iterations. Capped at ``n``. Default is
        ``min(30, n)`` for a new subspace and ``min(capacity, n)`` when
        `subspace` is given. A value larger than the capacity of
        `subspace` grows it.
    tol : float, optional
        Happy-breakdown tolerance relative to ``opnorm(A)``. Default is
        1e-7.
    norm : callable, optional
        Vector norm. Default is ``numpy.linalg.norm``.
    opnorm : callable, optional
        Operator norm used to scale `tol`. Default is the infinity norm.
    subspace : KrylovSubspace, optional
        Subspace to refill in place.
    cache : ndarray, optional
        Work vector of length ``n``.

    Returns
    -------
    KrylovSubspace
        The populated subspace.

    Raises
    ------
    ValueError
        If the shapes of `A`, `b`, `subspace` and `cache` do not agree, or
        `subspace` or `cache` is real while `A` or `b` is complex.
    """
    A = as_operator(A)
    b = np.asarray(b)
    n = operator_shape(A)[0]
    check_shape(b, (n,), "b")
    if m is not None and m < 1:
        raise ValueError(f"Number of Arnoldi iterations must be positive, got {m}.")

    if subspace is None:
        if m is None:
            m = min(DEFAULT_CAPACITY, n)
        dtype = np.result_type(b, A.dtype, np.float64)
        subspace = KrylovSubspace(n, capacity=min(m, n), dtype=dtype)
    elif subspace.n != n:
        raise ValueError(
            f"Dimension mismatch: subspace holds vectors of length {subspace.n}, "
            f"but the operator has size {n}."
        )
    if m is None:
        m = subspace.capacity
    m = min(m, n)

    check_castable(np.result_type(b, A.dtype), subspace.basis_storage, "subspace")
    if cache is None:
        cache = np.empty(n, dtype=subspace.dtype)
    else:
        check_shape(cache, (n,), "cache")
        check_castable(subspace.dtype, cache, "cache")

    if m > subspace.capacity:
        subspace.resize(m)

    V, H = subspace.basis_storage, subspace.projection_storage
    dot = np.vdot if np.iscomplexobj(V) else np.dot

    subspace.beta = norm(b)
    if subspace.beta == 0:
        subspace.dimension = 0
        logger.debug("Zero seed vector, Krylov subspace is empty")
        return subspace

    vtol = tol * opnorm(A)
    V[:, 0] = b / subspace.beta

    for j in range(m):
        operator_apply(A, V[:, j], out=cache)
        for i in range(j + 1):
            alpha = dot(V[:, i], cache)
            H[i, j] = alpha
            cache -= alpha * V[:, i]

        beta = norm(cache)
        if beta <= vtol or j + 1 == m:
            if j + 1 < m:
                logger.debug(
                    "Happy breakdown after %d of %d Arnoldi iterations (residual %.3e <= %.3e)",
                    j + 1,
                    m,
                    beta,
                    vtol,
                )
            subspace.dimension = j + 1
            return subspace

        H[j + 1, j] = beta
        V[:, j + 1] = cache / beta
