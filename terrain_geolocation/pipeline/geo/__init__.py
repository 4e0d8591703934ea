"""
pipeline/geo: transform math and the model geo-reference.

Public API:
- TransformClassifier / classify(matrix) -> TransformKind
- planar_angle(u, v, normal)
- GeoReferenceModel(store).move_earth(movement)
"""

from .math_helper import TransformClassifier, TransformKind, classify, is_identity, is_scaling, planar_angle
from .georeference import GeoReference, GeoReferenceModel
from .projection import LatLong, UTMPoint

__all__ = [
    "TransformClassifier",
    "TransformKind",
    "classify",
    "is_identity",
    "is_scaling",
    "planar_angle",
    "GeoReference",
    "GeoReferenceModel",
    "LatLong",
    "UTMPoint",
]
