"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole (perspective) camera with an explicit image plane

Camera responsibilities:
    - Map a discrete pixel (ix, iy) to a world-space ray through its centre
    - Support look-at positioning with an up vector
    - Carry the output resolution used by the renderer

Pixel coordinates:
    ix in [0, nx): left to right across the image
    iy in [0, ny): bottom to top across the image
"""

from .pinhole import PinholeCamera

__all__ = [
    "PinholeCamera",
]
