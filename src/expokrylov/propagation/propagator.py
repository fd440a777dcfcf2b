"""Propagator module.

This module contains the KrylovPropagator class for repeatedly
evaluating exp(t*A) b and phi_k(t*A) b with a fixed operator, as needed
inside a time-stepping loop.
"""

import logging

import numpy as np
import xarray as xr

from expokrylov.math.arnoldi import arnoldi
from expokrylov.math.constants import DEFAULT_BREAKDOWN_TOL, DEFAULT_CAPACITY
from expokrylov.math.krylov_expm import expmv_from_subspace, phimv_from_subspace
from expokrylov.primitives.krylov_subspace import KrylovSubspace
from expokrylov.primitives.operator import (
    as_operator,
    operator_infinity_norm,
    operator_shape,
)
from expokrylov.primitives.scratch import phimv_cache

logger = logging.getLogger(__name__)


class KrylovPropagator(object):
    """Class for Krylov exponential and phi-function products with a fixed operator.

    Owns a Krylov subspace and all scratch buffers, allocated once, so
    that repeated calls do not reallocate. The operator norm used for
    the happy-breakdown test is evaluated once at construction.

    Attributes
    ----------
    A : ndarray, sparse matrix or LinearOperator
        Linear operator.
    settings : xarray.Dataset
        Operator size `n`, Krylov dimension `krylov_dim`, breakdown
        tolerance `tol` and highest phi order `order`.
    subspace : KrylovSubspace
        Krylov subspace built by the last call to :meth:`update`.
    """

    def __init__(
        self,
        A,
        krylov_dim=DEFAULT_CAPACITY,
        tol=DEFAULT_BREAKDOWN_TOL,
        order=1,
        norm=np.linalg.norm,
        opnorm=operator_infinity_norm,
        dtype=None,
    ):
        """Initialize the propagator.

        Parameters
        ----------
        A : array-like, sparse matrix or LinearOperator
            Square linear operator of shape ``(n, n)``.
        krylov_dim : int, optional
            Krylov subspace dimension, capped at ``n``. Default is 30.
        tol : float, optional
            Happy-breakdown tolerance relative to ``opnorm(A)``.
            Default is 1e-7.
        order : int, optional
            Highest phi-function order computed by :meth:`phimv`.
            Default is 1.
        norm : callable, optional
            Vector norm. Default is ``numpy.linalg.norm``.
        opnorm : callable, optional
            Operator norm used to scale `tol`. Default is the infinity
            norm.
        dtype : data-type, optional
            Data type of the subspace and work arrays. Defaults to the
            operator's floating point type. Use a complex type for
            complex seed vectors or complex `t`.

        Raises
        ------
        ValueError
            If `A` is not square, or `krylov_dim` or `order` is not
            positive.
        """
        if krylov_dim < 1:
            raise ValueError(f"krylov_dim must be positive, got {krylov_dim}.")
        if order < 1:
            raise ValueError(f"order must be at least 1, got {order}.")

        self.A = as_operator(A)
        n = operator_shape(self.A)[0]

        self.settings = xr.Dataset(
            {
                "n": n,
                "krylov_dim": min(krylov_dim, n),
                "tol": tol,
                "order": order,
            }
        )

        if dtype is None:
            dtype = np.result_type(self.A.dtype, np.float64)
        capacity = int(self.settings.krylov_dim)

        self.norm = norm
        self.operator_norm = opnorm(self.A)

        self.subspace = KrylovSubspace(n, capacity=capacity, dtype=dtype)
        self._arnoldi_cache = np.empty(n, dtype=dtype)
        self._expmv_cache = np.empty((capacity, capacity), dtype=dtype)
        self._phimv_caches = phimv_cache(capacity, order, dtype=dtype)
        self._has_subspace = False

    def update(self, b):
        """Build the Krylov subspace for a new seed vector.

        Parameters
        ----------
        b : array-like
            Seed vector of length ``n``.

        Returns
        -------
        KrylovSubspace
            The refilled subspace.
        """
        arnoldi(
            self.A,
            b,
            m=int(self.settings.krylov_dim),
            tol=float(self.settings.tol),
            norm=self.norm,
            opnorm=lambda A: self.operator_norm,
            subspace=self.subspace,
            cache=self._arnoldi_cache,
        )
        self._has_subspace = True

        logger.debug(
            "Updated Krylov subspace: dimension %d, beta %.3e",
            self.subspace.dimension,
            self.subspace.beta,
        )
        return self.subspace

    @property
    def breakdown(self):
        """Whether the last update stopped early (happy breakdown)."""
        return self._has_subspace and self.subspace.dimension < int(self.settings.krylov_dim)

    def _prepare(self, b):
        if b is not None:
            self.update(b)
        elif not self._has_subspace:
            raise ValueError("No Krylov subspace available. Call update(b) or pass b.")

    def expmv(self, t, b=None, out=None):
        """Approximate exp(t*A) b.

        Parameters
        ----------
        t : float
            Time multiplier.
        b : array-like, optional
            New seed vector. If not given, the subspace from the last
            :meth:`update` is reused.
        out : ndarray, optional
            Output vector of length ``n``.

        Returns
        -------
        ndarray
            Approximation to exp(t*A) b.
        """
        self._prepare(b)
        return expmv_from_subspace(t, self.subspace, out=out, cache=self._expmv_cache)

    def phimv(self, t, b=None, out=None):
        """Approximate [phi_0(t*A) b, ..., phi_k(t*A) b] with k = `order`.

        Parameters
        ----------
        t : float
            Time multiplier.
        b : array-like, optional
            New seed vector. If not given, the subspace from the last
            :meth:`update` is reused.
        out : ndarray, optional
            Output array of shape ``(n, order + 1)``.

        Returns
        -------
        ndarray
            Array of shape ``(n, order + 1)``.
        """
        self._prepare(b)
        return phimv_from_subspace(
            t,
            self.subspace,
            int(self.settings.order),
            out=out,
            caches=self._phimv_caches,
        )

    def settings_match(self, settings):
        """Check whether `settings` are identical to this propagator's settings.

        Parameters
        ----------
        settings : xarray.Dataset
            Settings to compare with, for example from another
            propagator.

        Returns
        -------
        bool
            True if the datasets are identical.
        """
        return self.settings.identical(settings)
