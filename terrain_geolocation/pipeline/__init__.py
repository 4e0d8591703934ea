"""Terrain geo-location pipeline: host-independent sync core plus Blender bindings."""
