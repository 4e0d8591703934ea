"""
Terrain Crop Engine

Regenerates the visible terrain from the hidden terrain data after the
viewport was resized:

1. Remember the viewport's content bounds (local frame). After a resize the
   scale lives in the viewport transform, so these local bounds map to the
   new footprint.
2. Clear the viewport.
3. Copy the full terrain data into the viewport's local frame and flatten it.
4. Keep the remembered footprint but take min/max Z from the copied terrain.
5. Build a cutting box over those bounds.
6. Intersect the copied terrain with the box.
7. Erase edges whose midpoint ended up outside the bounds.
8. Erase the box.

INVARIANT:
- Cropping is horizontal only; the vertical extent always comes from the data.
- The cleanup pass in step 7 is best effort and never fails the crop.
"""

from dataclasses import dataclass

import numpy as np

from ...utils.common import SyncConfig
from ...utils.logging_system import log_info, log_warn
from ..geo.math_helper import Z_AXIS, invert
from .bounds import BoundingBox


@dataclass
class CropResult:
    footprint: BoundingBox
    combined_bounds: BoundingBox
    removed_edges: int = 0


class TerrainCropEngine:

    def __init__(self, host, config: SyncConfig = None):
        self.host = host
        self.config = config or SyncConfig()

    def copy_into(self, source, target):
        """Flattened copy of ``source``'s content, placed in ``target``'s local frame."""
        transform = invert(
            self.host.get_transform(target), context="Crop", tolerance=self.config.singular_tolerance
        ) @ self.host.get_transform(source)
        self.host.copy_content(source, target, transform)
        return transform

    def combined_bounds(self, footprint: BoundingBox, copied: BoundingBox) -> BoundingBox:
        """``footprint`` horizontally, ``copied`` vertically."""
        bounds = footprint.with_z_range(copied.min[2], copied.max[2])
        tol = self.config.length_tolerance
        if bounds.size[2] < tol:
            # Flat terrain: give the cutting box some thickness.
            bounds = bounds.with_z_range(bounds.min[2] - tol, bounds.max[2] + tol)
        return bounds

    def build_cutting_box(self, container, bounds: BoundingBox):
        """Closed box over ``bounds``: bottom face pointing up, pushed up through the full height."""
        lo, hi = bounds.min, bounds.max
        box = self.host.add_group(container)
        pts = [
            (lo[0], lo[1], lo[2]),
            (hi[0], lo[1], lo[2]),
            (hi[0], hi[1], lo[2]),
            (lo[0], hi[1], lo[2]),
        ]
        face = self.host.add_face(box, pts)
        if float(np.dot(self.host.face_normal(face), Z_AXIS)) < 0.0:
            self.host.reverse_face(face)
        self.host.pushpull(face, float(hi[2] - lo[2]))
        return box

    def remove_outside_edges(self, container, bounds: BoundingBox) -> int:
        tol = self.config.length_tolerance
        outside = [
            edge_id
            for edge_id, start, end in self.host.edges(container)
            if not bounds.contains((np.asarray(start) + np.asarray(end)) / 2.0, tol)
        ]
        if outside:
            self.host.erase_edges(container, outside)
        return len(outside)

    def crop(self, source, target) -> CropResult:
        """Redraw ``target`` from ``source`` cropped to ``target``'s footprint.

        Returns None (and leaves ``target`` untouched) if ``target`` has no
        content to take a footprint from.
        """
        footprint = self.host.content_bounds(target)
        if footprint.empty:
            log_warn("[Crop] viewport has no content, nothing to take a footprint from")
            return None

        self.host.clear_content(target)
        self.copy_into(source, target)

        copied = self.host.content_bounds(target)
        if copied.empty:
            log_warn("[Crop] terrain data is empty, viewport left empty")
            return CropResult(footprint, footprint)

        bounds = self.combined_bounds(footprint, copied)
        box = self.build_cutting_box(target, bounds)
        try:
            self.host.intersect_with(target, box)
            removed = self.remove_outside_edges(target, bounds)
        finally:
            self.host.erase(box)

        size = bounds.size
        log_info(
            f"[Crop] footprint={size[0]:.3f}x{size[1]:.3f}"
            f" z=[{bounds.min[2]:.3f}, {bounds.max[2]:.3f}] cleanup_removed={removed}"
        )
        return CropResult(footprint, bounds, removed)
