"""Linear operator capabilities.

This module provides the small set of operations the Krylov algorithms
need from a linear operator: applying it to a vector, querying its
shape, and estimating its infinity norm. Dense arrays, sparse matrices
and matrix-free ``scipy.sparse.linalg.LinearOperator`` objects are all
accepted.
"""

import numpy as np
import scipy.sparse as sp
from scipy.sparse.linalg import LinearOperator, onenormest
from scipy.sparse.linalg import norm as sparse_norm


def as_operator(A):
    """Return `A` as a sparse matrix, LinearOperator or ndarray.

    Sparse matrices and ``LinearOperator`` objects are returned
    unchanged, anything else is converted with ``numpy.asarray``.
    """
    if sp.issparse(A) or isinstance(A, LinearOperator):
        return A
    return np.asarray(A)


def operator_shape(A):
    """Shape of a square linear operator.

    Parameters
    ----------
    A : array-like, sparse matrix or LinearOperator
        Linear operator.

    Returns
    -------
    tuple of int
        Shape ``(n, n)`` of the operator.

    Raises
    ------
    ValueError
        If the operator is not square.
    """
    shape = tuple(A.shape)
    if len(shape) != 2 or shape[0] != shape[1]:
        raise ValueError(f"Dimension mismatch: operator must be square, got shape {shape}")
    return shape


def operator_apply(A, x, out=None):
    """Apply a linear operator to a vector.

    Parameters
    ----------
    A : array-like, sparse matrix or LinearOperator
        Linear operator.
    x : ndarray
        Vector of length ``n``.
    out : ndarray, optional
        Buffer of length ``n`` receiving the result.

    Returns
    -------
    ndarray
        The product ``A @ x``, written into `out` if it is given.
    """
    y = np.asarray(A.dot(x)).reshape(-1)
    if out is None:
        return y
    out[:] = y
    return out


def operator_infinity_norm(A):
    """Infinity norm of a linear operator.

    The norm is exact for dense and sparse matrices. For a matrix-free
    ``LinearOperator`` it is estimated as the 1-norm of the adjoint,
    which requires the operator to define ``rmatvec``.

    Parameters
    ----------
    A : array-like, sparse matrix or LinearOperator
        Linear operator.

    Returns
    -------
    float
        The (estimated) infinity norm of `A`.

    Raises
    ------
    ValueError
        If `A` is a ``LinearOperator`` without an adjoint.
    """
    if sp.issparse(A):
        return float(sparse_norm(A, np.inf))

    if isinstance(A, LinearOperator):
        try:
            A.rmatvec(np.zeros(A.shape[0], dtype=A.dtype))
        except NotImplementedError as error:
            raise ValueError(
                "Cannot estimate the infinity norm of a LinearOperator without rmatvec. "
                "Pass an explicit 'opnorm' callable instead."
            ) from error
        return float(onenormest(A.H))

    return float(np.linalg.norm(np.asarray(A), np.inf))
