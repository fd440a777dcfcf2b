"""Scratch buffers for repeated phi-function evaluations.

This module defines the named tuples holding the work arrays used by
the dense and Krylov phi-function routines, together with factories
that allocate them with the required shapes. Passing the same scratch
buffers to repeated calls, for example inside a time-stepping loop,
avoids reallocating them on every call. Every routine overwrites the
part of a buffer it uses before reading from it.
"""

from collections import namedtuple

import numpy as np

# Work arrays for dense_phi_matrix with an m x m matrix and order k.
PhiMatrixCache = namedtuple("PhiMatrixCache", ["basis_vector", "phi_columns", "augmented"])

# Work arrays for phimv_from_subspace. Buffers may be larger than needed,
# only their leading blocks are used.
PhimvCache = namedtuple(
    "PhimvCache", ["unit_vector", "scaled_projection", "augmented", "reduced"]
)


def check_shape(array, shape, name):
    """Raise if `array` does not have exactly the given shape.

    Parameters
    ----------
    array : ndarray
        Array to check.
    shape : tuple of int
        Required shape.
    name : str
        Name used in the error message.

    Raises
    ------
    ValueError
        If the shapes differ.
    """
    if tuple(np.shape(array)) != tuple(shape):
        raise ValueError(
            f"Dimension mismatch: '{name}' has shape {np.shape(array)}, expected {tuple(shape)}."
        )


def check_min_shape(array, shape, name):
    """Raise if `array` is smaller than the given shape along any axis.

    Parameters
    ----------
    array : ndarray
        Array to check.
    shape : tuple of int
        Minimum shape.
    name : str
        Name used in the error message.

    Raises
    ------
    ValueError
        If `array` has the wrong number of dimensions or is too small.
    """
    actual = np.shape(array)
    if len(actual) != len(shape) or any(a < s for a, s in zip(actual, shape)):
        raise ValueError(
            f"Dimension mismatch: '{name}' has shape {actual}, expected at least {tuple(shape)}."
        )


def check_castable(dtype, array, name):
    """Raise if values of type `dtype` cannot be stored in `array`.

    Storing complex values in a real array would silently drop their
    imaginary part, so only casts within the same kind are accepted.

    Parameters
    ----------
    dtype : data-type
        Type of the values to be stored.
    array : ndarray
        Destination array.
    name : str
        Name used in the error message.

    Raises
    ------
    ValueError
        If `dtype` cannot be cast to the data type of `array`.
    """
    if not np.can_cast(dtype, array.dtype, casting="same_kind"):
        raise ValueError(
            f"Data type mismatch: '{name}' has dtype {array.dtype}, "
            f"which cannot hold values of type {np.dtype(dtype)}."
        )


def phi_matrix_cache(m, k, dtype=np.float64):
    """Allocate work arrays for :func:`dense_phi_matrix`.

    Parameters
    ----------
    m : int
        Size of the square matrix.
    k : int
        Highest phi-function order.
    dtype : data-type, optional
        Data type of the buffers. Default is float64.

    Returns
    -------
    PhiMatrixCache
        Buffers of shapes ``(m,)``, ``(m, k + 1)`` and ``(m + k, m + k)``.
    """
    return PhiMatrixCache(
        np.zeros(m, dtype=dtype),
        np.zeros((m, k + 1), dtype=dtype),
        np.zeros((m + k, m + k), dtype=dtype),
    )


def check_phi_matrix_cache(caches, m, k, dtype=None):
    """Validate user-supplied :class:`PhiMatrixCache` buffers.

    If `dtype` is given, the buffers must also be able to hold values of
    that type.
    """
    basis_vector, phi_columns, augmented = caches
    check_shape(basis_vector, (m,), "basis_vector")
    check_shape(phi_columns, (m, k + 1), "phi_columns")
    check_shape(augmented, (m + k, m + k), "augmented")
    if dtype is not None:
        check_castable(dtype, phi_columns, "phi_columns")
        check_castable(dtype, augmented, "augmented")


def phimv_cache(capacity, k, dtype=np.float64):
    """Allocate work arrays for :func:`phimv_from_subspace`.

    The buffers are sized for the largest subspace dimension expected,
    so a single cache serves subspaces of any dimension up to
    `capacity`.

    Parameters
    ----------
    capacity : int
        Largest Krylov subspace dimension the buffers must handle.
    k : int
        Highest phi-function order.
    dtype : data-type, optional
        Data type of the buffers. Default is float64.

    Returns
    -------
    PhimvCache
        Buffers of shapes ``(capacity,)``, ``(capacity, capacity)``,
        ``(capacity + k, capacity + k)`` and ``(capacity, k + 1)``.
    """
    return PhimvCache(
        np.zeros(capacity, dtype=dtype),
        np.zeros((capacity, capacity), dtype=dtype),
        np.zeros((capacity + k, capacity + k), dtype=dtype),
        np.zeros((capacity, k + 1), dtype=dtype),
    )


def check_phimv_cache(caches, m, k, dtype=None):
    """Validate user-supplied :class:`PhimvCache` buffers for dimension `m`.

    If `dtype` is given, the buffers must also be able to hold values of
    that type.
    """
    unit_vector, scaled_projection, augmented, reduced = caches
    check_min_shape(unit_vector, (m,), "unit_vector")
    check_min_shape(scaled_projection, (m, m), "scaled_projection")
    check_min_shape(augmented, (m + k, m + k), "augmented")
    check_min_shape(reduced, (m, k + 1), "reduced")
    if dtype is not None:
        check_castable(dtype, scaled_projection, "scaled_projection")
        check_castable(dtype, augmented, "augmented")
        check_castable(dtype, reduced, "reduced")
