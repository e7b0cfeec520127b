import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np

from ..config import SelectorSettings
from .camera import OrbitCamera
from .model import InteractableObject
from .transforms import normalize, quat_rotate

log = logging.getLogger(__name__)


@dataclass
class Candidate:
    obj: InteractableObject
    alignment: float
    distance: float


class ObjectSelector:
    """
    Finds the object the user is grabbing: the one facing the camera most
    directly near the middle of the viewport.
    """

    def __init__(self, settings: Optional[SelectorSettings] = None):
        self.settings = settings or SelectorSettings()

    def candidates(self, camera: OrbitCamera, objects: Iterable[InteractableObject]) -> List[Candidate]:
        s = self.settings
        view_dir = camera.view_direction()
        if not view_dir.any():
            return []

        found = []
        for obj in objects:
            ndc = camera.project(obj.position)
            if ndc is None:
                continue
            x, y, z = ndc
            if z < -1.0 or z > 1.0:
                continue
            if abs(x) >= s.viewport_limit or abs(y) >= s.viewport_limit:
                continue

            normal = normalize(obj.normal)
            if not normal.any():
                continue
            # Face-on view of the front gives -1
            alignment = float(np.dot(view_dir, normal))
            if alignment >= s.max_alignment:
                continue

            distance = float(np.linalg.norm(obj.position - camera.position))
            found.append(Candidate(obj, alignment, distance))

        return self._rank(found)

    def select(self, camera: OrbitCamera, objects: Iterable[InteractableObject]) -> Optional[InteractableObject]:
        ranked = self.candidates(camera, objects)
        if not ranked:
            log.debug("Grab found no candidate")
            return None
        best = ranked[0]
        log.debug("Selected %r (alignment %.3f, distance %.2f)", best.obj.handle, best.alignment, best.distance)
        return best.obj

    def pick(self, camera: OrbitCamera, objects: Iterable[InteractableObject],
             ndc_x: float, ndc_y: float) -> Optional[InteractableObject]:
        """Nearest object whose quad is hit by the ray through an NDC point."""
        origin, direction = camera.ray_from_ndc(ndc_x, ndc_y)
        if not direction.any():
            return None

        best, best_t = None, None
        for obj in objects:
            normal = normalize(obj.normal)
            denom = float(np.dot(direction, normal))
            if abs(denom) < 1e-9:
                continue
            t = float(np.dot(obj.position - origin, normal)) / denom
            if t <= 0:
                continue
            local = origin + direction * t - obj.position
            right = quat_rotate(obj.orientation, (1.0, 0.0, 0.0))
            up = quat_rotate(obj.orientation, (0.0, 1.0, 0.0))
            if abs(np.dot(local, right)) > obj.width / 2 or abs(np.dot(local, up)) > obj.height / 2:
                continue
            if best_t is None or t < best_t:
                best, best_t = obj, t
        return best

    def _rank(self, found: List[Candidate]) -> List[Candidate]:
        """
        Best alignment first. Candidates within the tie band of the best one
        are ordered by camera distance and lead the list.
        """
        if not found:
            return []
        best = min(c.alignment for c in found)
        tied = [c for c in found if c.alignment - best < self.settings.tie_band]
        rest = [c for c in found if c.alignment - best >= self.settings.tie_band]
        tied.sort(key=lambda c: (c.distance, c.alignment))
        rest.sort(key=lambda c: (c.alignment, c.distance))
        return tied + rest
