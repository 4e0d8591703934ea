"""
Blender implementation of the host collaborators.

- Terrain objects are mesh objects; their "content" is the mesh data in the
  object's local frame.
- Geometry edits go through bmesh.
- Tracked transforms are ID custom properties on the object.
- The geo-reference lives in scene custom properties (TGEO_* keys).
- Transactions snapshot everything a sync cycle may touch and restore it on
  abort; commit pushes one undo step unless the cycle wrote nothing.
"""

from typing import Iterable, List, Sequence

try:
    import bpy  # type: ignore
    import bmesh  # type: ignore
    from mathutils import Matrix, Vector  # type: ignore
except ModuleNotFoundError as exc:
    raise ImportError("bpy not found; run this add-on inside Blender.") from exc

import numpy as np

from ...utils.common import (
    SCENE_KEY_HEIGHT,
    SCENE_KEY_LATITUDE,
    SCENE_KEY_LONGITUDE,
    SCENE_KEY_NORTH_ANGLE,
    SyncConfig,
)
from ...utils.logging_system import log_info, log_warn
from ..terrain.bounds import BoundingBox
from .interfaces import AttributeStore, GeometryHost, GeoReferenceStore, NotificationSource, Transaction


CUT_BOX_NAME = "TGEO_CutBox"


def to_numpy(matrix) -> np.ndarray:
    return np.array([list(row) for row in matrix], dtype=float)


def to_blender(matrix) -> "Matrix":
    return Matrix(np.asarray(matrix, dtype=float).tolist())


def _scene():
    return bpy.context.scene


class BlenderFace:
    """Face handle: owning object + polygon index."""

    __slots__ = ("obj", "index")

    def __init__(self, obj, index: int):
        self.obj = obj
        self.index = index


class _EditMesh:
    """Context manager: bmesh of an object's mesh, written back on exit."""

    def __init__(self, obj):
        self.obj = obj
        self.bm = None

    def __enter__(self):
        self.bm = bmesh.new()
        self.bm.from_mesh(self.obj.data)
        self.bm.verts.ensure_lookup_table()
        self.bm.edges.ensure_lookup_table()
        self.bm.faces.ensure_lookup_table()
        return self.bm

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is None:
                self.bm.to_mesh(self.obj.data)
                self.obj.data.update()
        finally:
            self.bm.free()
        return False


class BlenderHost(GeometryHost, AttributeStore):

    def __init__(self, config: SyncConfig = None):
        self.config = config or SyncConfig()

    # ------------------------------------------------------------------
    # Objects / transforms
    # ------------------------------------------------------------------

    def find_object(self, name):
        obj = _scene().objects.get(name)
        if obj is None or obj.type != 'MESH':
            return None
        return obj

    def is_valid(self, handle) -> bool:
        if handle is None:
            return False
        try:
            current = bpy.data.objects.get(handle.name)
        except ReferenceError:
            return False
        return current is not None and current == handle

    def get_transform(self, handle) -> np.ndarray:
        return to_numpy(handle.matrix_world)

    def set_transform(self, handle, matrix):
        handle.matrix_world = to_blender(matrix)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def content_bounds(self, handle) -> BoundingBox:
        return BoundingBox.from_points(tuple(v.co) for v in handle.data.vertices)

    def clear_content(self, handle):
        bm = bmesh.new()
        try:
            bm.to_mesh(handle.data)
        finally:
            bm.free()
        handle.data.update()

    def copy_content(self, source, target, matrix):
        tmp = source.data.copy()
        try:
            tmp.transform(to_blender(matrix))
            with _EditMesh(target) as bm:
                # from_mesh appends, which also flattens the copy into loose geometry.
                bm.from_mesh(tmp)
        finally:
            bpy.data.meshes.remove(tmp)

    # ------------------------------------------------------------------
    # Cutting solid
    # ------------------------------------------------------------------

    def add_group(self, container):
        mesh = bpy.data.meshes.new(CUT_BOX_NAME)
        obj = bpy.data.objects.new(CUT_BOX_NAME, mesh)
        collections = container.users_collection or (_scene().collection,)
        collections[0].objects.link(obj)
        obj.matrix_world = container.matrix_world.copy()
        obj.display_type = 'WIRE'
        obj.hide_render = True
        return obj

    def add_face(self, group, points: Sequence[Sequence[float]]):
        with _EditMesh(group) as bm:
            verts = [bm.verts.new(Vector(p)) for p in points]
            face = bm.faces.new(verts)
            face.normal_update()
            index = len(bm.faces) - 1
        return BlenderFace(group, index)

    def face_normal(self, face: BlenderFace) -> np.ndarray:
        with _EditMesh(face.obj) as bm:
            f = bm.faces[face.index]
            f.normal_update()
            return np.array(tuple(f.normal), dtype=float)

    def reverse_face(self, face: BlenderFace):
        with _EditMesh(face.obj) as bm:
            bmesh.ops.reverse_faces(bm, faces=[bm.faces[face.index]])

    def pushpull(self, face: BlenderFace, distance: float):
        with _EditMesh(face.obj) as bm:
            f = bm.faces[face.index]
            f.normal_update()
            offset = f.normal.copy() * distance
            res = bmesh.ops.extrude_face_region(bm, geom=[f], use_keep_orig=True)
            moved = [g for g in res["geom"] if isinstance(g, bmesh.types.BMVert)]
            bmesh.ops.translate(bm, vec=offset, verts=moved)
            bmesh.ops.recalc_face_normals(bm, faces=bm.faces[:])

    def intersect_with(self, container, solid):
        """Keep the part of ``container``'s mesh inside the convex ``solid``.

        Terrain meshes are open surfaces, which boolean modifiers handle
        poorly, so the mesh is bisected by every face plane of the solid and
        the outer side discarded.
        """
        to_local = container.matrix_world.inverted() @ solid.matrix_world
        planes = []
        for poly in solid.data.polygons:
            co = to_local @ poly.center
            no = (to_local.to_3x3().inverted().transposed() @ poly.normal).normalized()
            planes.append((co, no))

        with _EditMesh(container) as bm:
            for co, no in planes:
                geom = bm.verts[:] + bm.edges[:] + bm.faces[:]
                if not geom:
                    break
                bmesh.ops.bisect_plane(
                    bm,
                    geom=geom,
                    dist=self.config.length_tolerance * 0.1,
                    plane_co=co,
                    plane_no=no,
                    clear_outer=True,
                )

    def edges(self, container):
        mesh = container.data
        verts = mesh.vertices
        return [
            (e.index, np.array(verts[e.vertices[0]].co), np.array(verts[e.vertices[1]].co))
            for e in mesh.edges
        ]

    def erase_edges(self, container, edge_ids: Iterable[int]):
        ids = set(edge_ids)
        with _EditMesh(container) as bm:
            doomed = [e for e in bm.edges if e.index in ids]
            bmesh.ops.delete(bm, geom=doomed, context='EDGES')
            loose = [v for v in bm.verts if not v.link_edges]
            if loose:
                bmesh.ops.delete(bm, geom=loose, context='VERTS')

    def erase(self, handle):
        mesh = handle.data
        bpy.data.objects.remove(handle, do_unlink=True)
        if mesh is not None and mesh.users == 0:
            bpy.data.meshes.remove(mesh)

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def get_attribute(self, handle, namespace, key, default=None):
        group = handle.get(namespace)
        if group is None:
            return default
        value = group.get(key, default)
        if hasattr(value, "to_list"):
            return value.to_list()
        return value

    def set_attribute(self, handle, namespace, key, value):
        if handle.get(namespace) is None:
            handle[namespace] = {}
        handle[namespace][key] = value


class BlenderGeoStore(GeoReferenceStore):
    """Geo-reference in scene custom properties."""

    def get_north_angle_degrees(self) -> float:
        return float(_scene().get(SCENE_KEY_NORTH_ANGLE, 0.0))

    def set_north_angle_degrees(self, value: float):
        _scene()[SCENE_KEY_NORTH_ANGLE] = float(value)

    def get_height(self) -> float:
        return float(_scene().get(SCENE_KEY_HEIGHT, 0.0))

    def set_height(self, value: float):
        _scene()[SCENE_KEY_HEIGHT] = float(value)

    def get_latlong(self):
        scene = _scene()
        return float(scene.get(SCENE_KEY_LATITUDE, 0.0)), float(scene.get(SCENE_KEY_LONGITUDE, 0.0))

    def set_latlong(self, latitude: float, longitude: float):
        scene = _scene()
        scene[SCENE_KEY_LATITUDE] = float(latitude)
        scene[SCENE_KEY_LONGITUDE] = float(longitude)


GEO_KEYS = (SCENE_KEY_NORTH_ANGLE, SCENE_KEY_HEIGHT, SCENE_KEY_LATITUDE, SCENE_KEY_LONGITUDE)


class BlenderTransaction(Transaction):
    """Snapshot/restore edit scope around the two terrain objects and the geo-reference."""

    def __init__(self, host: BlenderHost, config: SyncConfig = None):
        self.host = host
        self.config = config or SyncConfig()
        self.name = None
        self._objects = []
        self._geo = {}
        self._names = set()

    def _snapshot_object(self, obj):
        mesh = bmesh.new()
        mesh.from_mesh(obj.data)
        attrs = obj.get(self.config.attribute_namespace)
        attrs = attrs.to_dict() if attrs is not None else None
        return obj, obj.matrix_world.copy(), mesh, attrs

    def _release(self):
        for _obj, _mw, mesh, _attrs in self._objects:
            mesh.free()
        self._objects = []
        self._geo = {}
        self._names = set()

    def start(self, name: str):
        if self.name is not None:
            raise RuntimeError(f"operation {self.name!r} already open")
        self.name = name
        scene = _scene()
        self._names = {o.name for o in bpy.data.objects}
        self._geo = {k: scene[k] for k in GEO_KEYS if k in scene}
        for obj_name in (self.config.terrain_name, self.config.data_name):
            obj = self.host.find_object(obj_name)
            if obj is not None:
                self._objects.append(self._snapshot_object(obj))

    def commit(self, record_undo: bool = True):
        if record_undo:
            try:
                bpy.ops.ed.undo_push(message=self.name)
            except RuntimeError as ex:
                log_warn(f"[Sync] undo push skipped: {ex}")
        self.name = None
        self._release()

    def abort(self):
        scene = _scene()
        for obj in [o for o in bpy.data.objects if o.name not in self._names]:
            self.host.erase(obj)
        for obj, matrix_world, mesh, attrs in self._objects:
            if not self.host.is_valid(obj):
                continue
            # Assigning matrix_world tags a transform update, even for an equal matrix.
            if obj.matrix_world != matrix_world:
                obj.matrix_world = matrix_world
            mesh.to_mesh(obj.data)
            obj.data.update()
            if attrs is None:
                if self.config.attribute_namespace in obj:
                    del obj[self.config.attribute_namespace]
            else:
                obj[self.config.attribute_namespace] = attrs
        for key in GEO_KEYS:
            if key in self._geo:
                scene[key] = self._geo[key]
            elif key in scene:
                del scene[key]
        log_info(f"[Sync] operation {self.name!r} rolled back")
        self.name = None
        self._release()


class BlenderNotifications(NotificationSource):
    """Transform-change notifications from depsgraph_update_post."""

    def __init__(self):
        self._observers = {}

    def add_observer(self, handle, callback):
        self._observers.setdefault(handle.name, []).append(callback)
        if self._on_depsgraph_update not in bpy.app.handlers.depsgraph_update_post:
            bpy.app.handlers.depsgraph_update_post.append(self._on_depsgraph_update)

    def remove_observer(self, handle, callback):
        try:
            name = handle.name
        except ReferenceError:
            name = None
        for key in ([name] if name in self._observers else list(self._observers)):
            callbacks = self._observers[key]
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                del self._observers[key]
        if not self._observers:
            self.clear()

    def clear(self):
        self._observers = {}
        if self._on_depsgraph_update in bpy.app.handlers.depsgraph_update_post:
            bpy.app.handlers.depsgraph_update_post.remove(self._on_depsgraph_update)

    def _on_depsgraph_update(self, _scene, depsgraph):
        for update in depsgraph.updates:
            if not update.is_updated_transform or not isinstance(update.id, bpy.types.Object):
                continue
            callbacks: List = self._observers.get(update.id.name, [])
            for callback in list(callbacks):
                callback(update.id.original)
