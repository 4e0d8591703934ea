"""
Transform change tracking.

The last observed transform of a tracked object is persisted on the object
itself (attribute namespace from SyncConfig), so tracking survives saving and
reopening the document. Each delta() call reads the baseline, stores the
current transform as the new baseline and returns the change in between.
"""

import numpy as np

from ...utils.common import SyncConfig
from ...utils.logging_system import log_debug, log_info, log_warn
from ..geo.math_helper import as_matrix, invert, to_flat


class TransformTracker:
    """Per-object last-known-transform store."""

    def __init__(self, host, attributes, config: SyncConfig = None):
        self.host = host
        self.attributes = attributes
        self.config = config or SyncConfig()

    def _load(self, handle):
        raw = self.attributes.get_attribute(
            handle, self.config.attribute_namespace, self.config.transform_key
        )
        if raw is None:
            return None
        try:
            return as_matrix(raw)
        except (TypeError, ValueError) as ex:
            log_warn(f"[Tracker] discarding unreadable baseline: {ex}")
            return None

    def _store(self, handle, matrix):
        self.attributes.set_attribute(
            handle, self.config.attribute_namespace, self.config.transform_key, to_flat(matrix)
        )

    def init_transform_tracking(self, handle):
        """Capture the object's current transform as the baseline.

        Should be called within an operation.
        """
        self._store(handle, self.host.get_transform(handle))
        log_info("[Tracker] baseline captured")

    def is_tracked(self, handle) -> bool:
        return self._load(handle) is not None

    def delta(self, handle) -> np.ndarray:
        """Change in transform since the previous call: ``cur @ inverse(prev)``.

        Without a stored baseline the current transform becomes the baseline
        and the identity is returned, as it is for an unchanged transform
        (even a singular one). The baseline is refreshed before the
        inverse is taken. Inside an operation that write is rolled back with
        everything else when the operation aborts; callers re-capture the
        baseline afterwards (ChangeCoordinator does).

        Raises:
            SingularTransformError: if the previous transform cannot be inverted.
        """
        cur = self.host.get_transform(handle)
        prev = self._load(handle)
        self._store(handle, cur)
        if prev is None:
            log_info("[Tracker] no baseline yet, captured current transform")
            return np.eye(4)
        if np.array_equal(cur, prev):
            return np.eye(4)

        change = cur @ invert(prev, context="Tracker", tolerance=self.config.singular_tolerance)
        log_debug(f"[Tracker] delta={to_flat(change)}")
        return change
