import cv2
import numpy as np
from dataclasses import dataclass
from typing import List, Sequence

from ..exceptions import EngineError


@dataclass(frozen=True)
class Keypoint:
    """
    Detected image location

    Attributes:
        x, y: Sub-pixel position in image coordinates
        size: Keypoint diameter in pixels
        angle: Orientation in degrees, -1 when not computed
        octave: Octave the keypoint was detected in
        response: Detector response
        class_id: Scale space level, used internally by the engine
    """
    x: float
    y: float
    size: float
    angle: float = -1.0
    octave: int = 0
    response: float = 0.0
    class_id: int = -1

    @classmethod
    def from_cv(cls, kp: cv2.KeyPoint) -> "Keypoint":
        return cls(
            x=float(kp.pt[0]),
            y=float(kp.pt[1]),
            size=float(kp.size),
            angle=float(kp.angle),
            octave=int(kp.octave),
            response=float(kp.response),
            class_id=int(kp.class_id),
        )

    def to_cv(self) -> cv2.KeyPoint:
        return cv2.KeyPoint(self.x, self.y, self.size, self.angle,
                            self.response, self.octave, self.class_id)


@dataclass(frozen=True)
class DescriptorResult:
    """
    Output of the description stage

    ``indices`` point into the keypoint list handed to the stage and are
    strictly increasing; ``keypoints`` and the rows of ``descriptors`` are
    co-indexed with them.
    """
    indices: List[int]
    keypoints: List[Keypoint]
    descriptors: np.ndarray


class Features:
    """
    Keypoints and their descriptors kept as parallel sequences

    Row ``i`` of ``descriptors`` always belongs to ``keypoints[i]``.
    """

    def __init__(self, keypoints: Sequence[Keypoint], descriptors: np.ndarray):
        descriptors = np.asarray(descriptors)
        if descriptors.ndim != 2:
            raise EngineError(f"descriptors must be a 2-D array, got shape {descriptors.shape}")
        if len(keypoints) != descriptors.shape[0]:
            raise EngineError(
                f"{len(keypoints)} keypoints but {descriptors.shape[0]} descriptor rows")
        self.keypoints = list(keypoints)
        self.descriptors = descriptors

    def __len__(self) -> int:
        return len(self.keypoints)

    @property
    def dimension(self) -> int:
        return self.descriptors.shape[1]

    @classmethod
    def from_stage_output(cls, detected: Sequence[Keypoint], result: DescriptorResult) -> "Features":
        """
        Build the authoritative feature set after description

        Args:
            detected: Keypoints handed to the description stage
            result: What the description stage returned

        Returns:
            Features containing only the keypoints that received a descriptor,
            in detection order
        """
        indices = list(result.indices)
        if len(indices) != len(result.keypoints):
            raise EngineError(
                f"description stage returned {len(indices)} indices for "
                f"{len(result.keypoints)} keypoints")
        previous = -1
        for index in indices:
            if index <= previous or index >= len(detected):
                raise EngineError(f"description stage returned invalid keypoint index {index}")
            previous = index
        return cls(result.keypoints, result.descriptors)
