"""Krylov convergence for the 1D heat equation."""

import numpy as np
import scipy.sparse as sp
import matplotlib.pyplot as plt
from scipy.sparse.linalg import expm_multiply

import expokrylov

n = 400
dx = 1.0 / (n + 1)
x = np.linspace(dx, 1 - dx, n)
dt = 1e-3

# Dirichlet Laplacian on the unit interval.
A = sp.diags([1.0, -2.0, 1.0], [-1, 0, 1], shape=(n, n), format="csr") / dx**2
u0 = np.exp(-200 * (x - 0.5) ** 2)

reference = expm_multiply(dt * A, u0)

krylov_dims = np.arange(2, 61, 2)
errors = []
for m in krylov_dims:
    u = expokrylov.krylov_expmv(dt, A, u0, m=m)
    errors.append(np.linalg.norm(u - reference) / np.linalg.norm(reference))

# Propagate several steps reusing one subspace per step.
propagator = expokrylov.KrylovPropagator(A, krylov_dim=40, order=1)
u = u0.copy()
snapshots = [u.copy()]
for step in range(5):
    u = propagator.expmv(dt, u)
    snapshots.append(u.copy())
    print("step {}: Krylov dimension {}, breakdown {}".format(step, propagator.subspace.dimension, propagator.breakdown))

fig, axes = plt.subplots(ncols=2, figsize=(10, 4))
axes[0].semilogy(krylov_dims, errors, "o-")
axes[0].set_xlabel("Krylov dimension m")
axes[0].set_ylabel("relative error")
for i, snapshot in enumerate(snapshots):
    axes[1].plot(x, snapshot, label="t = {:.0e}".format(i * dt))
axes[1].set_xlabel("x")
axes[1].legend()
plt.tight_layout()
plt.show()
