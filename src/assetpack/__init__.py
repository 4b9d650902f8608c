"""assetpack package

Offline compiler that turns authored ``.obj`` meshes, ``.mtl`` material
libraries and images into a single compressed, path-indexed archive, plus the
runtime loaders that read it back.

Prefer the programmatic entry points in :mod:`assetpack.api` or the CLI in
:mod:`assetpack.cli`.
"""

from ._version import __version__  # noqa: F401

__all__ = ["__version__"]
