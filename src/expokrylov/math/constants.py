"""Numerical Constants

This module defines the default parameters used across the ExpoKrylov
package. For example, it provides the default Krylov subspace capacity
and the relative tolerance for detecting happy breakdown.
"""

DEFAULT_CAPACITY = 30
DEFAULT_BREAKDOWN_TOL = 1e-7
