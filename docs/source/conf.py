"""Configuration file for the Sphinx documentation builder.

For the full list of built-in configuration values, see the
documentation:

https://www.sphinx-doc.org/en/master/usage/configuration.html
"""

import os
import sys

# Add the package source directory to the system path.
sys.path.insert(0, os.path.abspath("../../src"))

# Set project information.
project = "ExpoKrylov"
copyright = "2026, ExpoKrylov Developers"
author = "ExpoKrylov Developers"

# Set general configuration options.
extensions = [
    "sphinx.ext.napoleon",
    "sphinx.ext.autodoc",
    "sphinx.ext.intersphinx",
    "sphinx.ext.viewcode",
    "myst_parser",
]

templates_path = ["_templates"]
exclude_patterns = []

nitpicky = True

# Set options for HTML output.
html_theme = "sphinx_rtd_theme"
html_static_path = ["_static"]

# Set options for autodoc.
# https://www.sphinx-doc.org/en/master/usage/extensions/autodoc.html

autodoc_default_options = {
    "members": True,
    "member-order": "bysource",
    "special-members": "__init__",
    "undoc-members": True,
    "show-inheritance": True,
    "exclude-members": "logger",
}

add_module_names = False

# Show defaults such as np.linalg.norm as written in the source.
autodoc_preserve_defaults = True

# Set options for intersphinx.
# https://www.sphinx-doc.org/en/master/usage/extensions/intersphinx.html

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable", None),
    "scipy": ("https://docs.scipy.org/doc/scipy", None),
    "xarray": ("https://docs.xarray.dev/en/stable", None),
}

# Set options for napoleon.
# https://www.sphinx-doc.org/en/master/usage/extensions/napoleon.html

napoleon_google_docstring = False
napoleon_preprocess_types = True
napoleon_type_aliases = {
    "ndarray": "numpy.ndarray",
    "LinearOperator": "scipy.sparse.linalg.LinearOperator",
    "KrylovSubspace": "expokrylov.primitives.krylov_subspace.KrylovSubspace",
    "PhiMatrixCache": "expokrylov.primitives.scratch.PhiMatrixCache",
    "PhimvCache": "expokrylov.primitives.scratch.PhimvCache",
}

# Docstring types that have no target in any inventory.
nitpick_ignore = [
    ("py:class", "optional"),
    ("py:class", "array-like"),
    ("py:class", "data-type"),
    ("py:class", "callable"),
    ("py:class", "sparse matrix"),
]

# Set otions for myst_parser.
# https://myst-parser.readthedocs.io/en/latest/index.html

source_suffix = {".rst": "restructuredtext", ".txt": "markdown", ".md": "markdown"}
