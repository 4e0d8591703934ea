"""
pipeline/terrain: viewport transform tracking and terrain cropping.

Public API:
- TransformTracker(host, attributes).delta(handle) -> 4x4 change since last call
- TerrainCropEngine(host).crop(source, target) -> CropResult
"""

from .bounds import BoundingBox
from .tracking import TransformTracker
from .terrain_crop import CropResult, TerrainCropEngine

__all__ = [
    "BoundingBox",
    "TransformTracker",
    "CropResult",
    "TerrainCropEngine",
]
