# -*- coding: utf-8 -*-
"""
I/O - Raster exchange type shared with imagery sources and writers.

Scene retrieval and file export live with the collaborators that own
them; this package only defines what crosses the boundary.

License
-------
MIT License
Copyright (c) 2024 geoint.org
"""

from grdl_sarflood.io.raster import BackscatterUnit, Raster

__all__ = ["BackscatterUnit", "Raster"]
