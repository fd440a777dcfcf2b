"""Krylov subspace storage.

This module provides the KrylovSubspace class, a resizable container
for the orthonormal basis and Hessenberg projection produced by the
Arnoldi process.
"""

import logging

import numpy as np

from expokrylov.math.constants import DEFAULT_CAPACITY

logger = logging.getLogger(__name__)


class KrylovSubspace(object):
    """Order-m Krylov subspace K_m(A, b) = span{b, Ab, ..., A^(m-1) b}.

    The subspace is allocated once with a fixed capacity and then filled
    (and refilled) in place by :func:`expokrylov.math.arnoldi.arnoldi`.
    Only the leading `dimension` columns of the basis and the leading
    `dimension` x `dimension` block of the projection are meaningful.

    Attributes
    ----------
    n : int
        Length of the vectors spanning the subspace.
    dimension : int
        Active subspace dimension m, with 0 <= m <= `capacity`.
    beta : float
        Norm of the seed vector used by the last Arnoldi call.

    Notes
    -----
    Growing the capacity reallocates the storage and is expensive. It
    only happens when :meth:`resize` is called, or when Arnoldi is
    explicitly asked for more iterations than the capacity allows.
    """

    def __init__(self, n, capacity=DEFAULT_CAPACITY, dtype=np.float64):
        """Allocate an uninitialized Krylov subspace.

        Parameters
        ----------
        n : int
            Length of the vectors spanning the subspace.
        capacity : int, optional
            Maximum number of Arnoldi iterations the storage can hold.
            Default is 30.
        dtype : data-type, optional
            Data type of the basis and projection. Default is float64.

        Raises
        ------
        ValueError
            If `n` or `capacity` is not positive.
        """
        if n < 1:
            raise ValueError(f"Vector length must be positive, got {n}.")
        if capacity < 1:
            raise ValueError(f"Capacity must be positive, got {capacity}.")

        self.n = n
        self.dimension = 0
        self.beta = 0.0
        self._V = np.empty((n, capacity), dtype=dtype)
        self._H = np.zeros((capacity, capacity), dtype=dtype)

    @property
    def capacity(self):
        """Maximum subspace dimension the storage can hold."""
        return self._V.shape[1]

    @property
    def dtype(self):
        """Data type of the stored basis and projection."""
        return self._V.dtype

    @property
    def V(self):
        """View of the active ``n x m`` orthonormal basis."""
        return self._V[:, : self.dimension]

    @property
    def H(self):
        """View of the active ``m x m`` upper Hessenberg projection."""
        return self._H[: self.dimension, : self.dimension]

    @property
    def basis_storage(self):
        """Full ``n x capacity`` basis storage."""
        return self._V

    @property
    def projection_storage(self):
        """Full ``capacity x capacity`` projection storage."""
        return self._H

    def view(self, which):
        """Active view of the basis or the projection.

        Parameters
        ----------
        which : {'V', 'H'}
            Selects the basis ('V') or the Hessenberg projection ('H').

        Returns
        -------
        ndarray
            View into the backing storage, bounded by `dimension`.

        Raises
        ------
        ValueError
            If `which` is not 'V' or 'H'.
        """
        if which == "V":
            return self.V
        elif which == "H":
            return self.H
        else:
            raise ValueError(f"View must be either 'V' or 'H', not {which!r}.")

    def __getitem__(self, which):
        return self.view(which)

    def resize(self, capacity):
        """Change the capacity, keeping the stored contents.

        Parameters
        ----------
        capacity : int
            New capacity.

        Returns
        -------
        KrylovSubspace
            The resized subspace (`self`).

        Raises
        ------
        ValueError
            If `capacity` is not positive.
        """
        if capacity < 1:
            raise ValueError(f"Capacity must be positive, got {capacity}.")

        previous = self.capacity
        if capacity >= previous:
            V = np.zeros((self.n, capacity), dtype=self.dtype)
            H = np.zeros((capacity, capacity), dtype=self.dtype)
            V[:, :previous] = self._V
            H[:previous, :previous] = self._H
            logger.info("Grew Krylov subspace capacity from %d to %d", previous, capacity)
        else:
            # Only a prefix was ever meaningful, so slicing is enough.
            V = self._V[:, :capacity]
            H = self._H[:capacity, :capacity]
            self.dimension = min(self.dimension, capacity)

        self._V, self._H = V, H
        return self

    def __repr__(self):
        with np.printoptions(threshold=20, edgeitems=2):
            return (
                f"{self.dimension}-dimensional Krylov subspace with fields\n"
                f"beta: {self.beta}\n"
                f"V: {self.V}\n"
                f"H: {self.H}"
            )


def krylov_subspace_create(n, capacity=DEFAULT_CAPACITY, dtype=np.float64):
    """Allocate an uninitialized Krylov subspace.

    See :class:`KrylovSubspace` for the meaning of the parameters.
    """
    return KrylovSubspace(n, capacity=capacity, dtype=dtype)
