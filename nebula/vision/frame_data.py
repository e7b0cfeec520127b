from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .landmarks import Landmark


@dataclass
class FrameData:
    # Input frame (BGR, numpy array), already mirrored if enabled
    raw_frame: Optional[np.ndarray] = None

    # Detected hands, each 21 normalized landmarks. Primary hand first.
    hands: List[List[Landmark]] = field(default_factory=list)

    timestamp_ms: float = 0.0
    # False when the video clock did not advance and detection was skipped
    is_new: bool = False

    fps: float = 0.0
    latency_ms: float = 0.0
