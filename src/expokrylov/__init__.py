"""
ExpoKrylov: Phi functions and Krylov exponential products for exponential integrators.

This package includes dense evaluation of the phi functions and Krylov
subspace approximations of matrix-exponential-vector and
phi-function-vector products.

Attributes
----------
KrylovPropagator : class
    Class for repeated Krylov products with a fixed operator.
KrylovSubspace : class
    Class for storing a Krylov basis and its Hessenberg projection.
arnoldi : function
    Function for building a Krylov subspace.
dense_phi_matrix : function
    Function for the matrix phi functions of a small matrix.
dense_phi_matrix_vector : function
    Function for matrix-phi-vector products with a small matrix.
expmv_from_subspace : function
    Function for exp(t*A) b from a precomputed Krylov subspace.
krylov_expmv : function
    Function for exp(t*A) b using Krylov.
krylov_phimv : function
    Function for phi_k(t*A) b using Krylov.
krylov_subspace_create : function
    Function for allocating a Krylov subspace.
phimv_from_subspace : function
    Function for phi_k(t*A) b from a precomputed Krylov subspace.
scalar_phi : function
    Function for the scalar phi functions.
"""

from .math.arnoldi import arnoldi
from .math.krylov_expm import (
    expmv_from_subspace,
    krylov_expmv,
    krylov_phimv,
    phimv_from_subspace,
)
from .math.phi_functions import dense_phi_matrix, dense_phi_matrix_vector, scalar_phi
from .primitives.krylov_subspace import KrylovSubspace, krylov_subspace_create
from .primitives.scratch import PhiMatrixCache, PhimvCache, phi_matrix_cache, phimv_cache
from .propagation.propagator import KrylovPropagator

__all__ = [
    "KrylovPropagator",
    "KrylovSubspace",
    "PhiMatrixCache",
    "PhimvCache",
    "arnoldi",
    "dense_phi_matrix",
    "dense_phi_matrix_vector",
    "expmv_from_subspace",
    "krylov_expmv",
    "krylov_phimv",
    "krylov_subspace_create",
    "phi_matrix_cache",
    "phimv_cache",
    "phimv_from_subspace",
    "scalar_phi",
]
