"""Exceptions raised by the terrain sync core."""


class TerrainSyncError(RuntimeError):
    """Base class for all terrain sync failures."""


class TerrainNotConfiguredError(TerrainSyncError):
    """Viewport or source object could not be found when attaching."""

    def __init__(self, missing):
        self.missing = tuple(missing)
        names = ", ".join(repr(n) for n in self.missing)
        super().__init__(
            f"[Sync] Not a valid terrain geo-location scene, missing: {names}. "
            f"Create a mesh named like the viewport and a hidden one for the terrain data."
        )


class SingularTransformError(TerrainSyncError):
    """A transform could not be inverted."""

    def __init__(self, context: str, determinant: float):
        self.context = context
        self.determinant = determinant
        super().__init__(f"[{context}] singular transform (det={determinant:.3e})")


class GeoReferenceError(TerrainSyncError):
    """Invalid geo-reference value or failed projection."""
