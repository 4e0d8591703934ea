"""
Terrain sync session: wires the core components to one set of host collaborators.

Usage:
    sync = TerrainSync(host, attributes, geo_store, transaction, notifications, scheduler, config)
    sync.attach()       # raises TerrainNotConfiguredError if a terrain object is missing
    ...                 # host notifications now drive coordinator cycles
    sync.detach()
"""

from ...utils.common import SyncConfig
from ...utils.errors import TerrainNotConfiguredError
from ...utils.logging_system import log_info
from ..geo.georeference import GeoReferenceModel
from .coordinator import ChangeCoordinator, TerrainHandles, operation
from .observer_bridge import ObserverBridge


class TerrainSync:

    def __init__(self, host, attributes, geo_store, transaction, notifications, scheduler,
                 config: SyncConfig = None, projection=None):
        self.config = config or SyncConfig()
        self.host = host
        self.transaction = transaction
        self.notifications = notifications
        self.handles = TerrainHandles(host, self.config)
        self.geo = GeoReferenceModel(geo_store, projection=projection, config=self.config)
        self.coordinator = ChangeCoordinator(
            host, attributes, self.geo, transaction, self.config, handles=self.handles
        )
        self.bridge = ObserverBridge(self.coordinator, scheduler)
        self._attached = None

    @property
    def attached(self) -> bool:
        return self._attached is not None

    def attach(self):
        """Start tracking the viewport and listen for its changes.

        Raises:
            TerrainNotConfiguredError: if the viewport or the terrain data is missing.
        """
        handles = self.handles.resolve()
        if handles is None:
            raise TerrainNotConfiguredError(self.handles.missing())
        viewport, _source = handles
        if self._attached is not None:
            self.detach()

        with operation(self.transaction, "Attach Terrain Tracking"):
            self.coordinator.tracker.init_transform_tracking(viewport)
        self.notifications.add_observer(viewport, self.bridge.on_change_entity)
        self._attached = viewport
        log_info(f"[Sync] attached to {self.config.terrain_name!r} / {self.config.data_name!r}")
        return viewport

    def detach(self):
        if self._attached is None:
            return
        self.notifications.remove_observer(self._attached, self.bridge.on_change_entity)
        self._attached = None
        log_info("[Sync] detached")

    def sync_now(self):
        """Run one cycle immediately, under the bridge guard."""
        return self.bridge.run_now()
