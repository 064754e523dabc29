import math
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..exceptions import EngineError
from ..options import DEFAULT_OPTIONS, DescriptorType, Diffusivity, Options
from .features import DescriptorResult, Keypoint

# Bits of a full MLDB descriptor per channel: 2x2, 3x3 and 4x4 grids
MLDB_BITS_PER_CHANNEL = 6 + 36 + 120
KAZE_DESCRIPTOR_LENGTH = 64

_DIFFUSIVITY_TO_CV = {
    Diffusivity.PM_G1: cv2.KAZE_DIFF_PM_G1,
    Diffusivity.PM_G2: cv2.KAZE_DIFF_PM_G2,
    Diffusivity.WEICKERT: cv2.KAZE_DIFF_WEICKERT,
    Diffusivity.CHARBONNIER: cv2.KAZE_DIFF_CHARBONNIER,
}


def descriptor_dimension(options: Options) -> int:
    """
    Length of one descriptor row for the given options

    Binary descriptors are counted in packed bytes, real ones in floats.
    """
    if not options.is_binary:
        return KAZE_DESCRIPTOR_LENGTH
    bits = options.descriptor_size or MLDB_BITS_PER_CHANNEL * options.descriptor_channels
    return int(math.ceil(bits / 8.0))


class FeatureEngine(ABC):
    """
    Staged feature extraction session

    A session is used once: ``build_scale_space``, then ``detect_features``,
    then ``compute_descriptors``. Calling a stage out of order, twice, or after
    a failed stage raises EngineError. Subclasses implement the ``_build``,
    ``_detect`` and ``_describe`` hooks.
    """

    STAGES = ("build_scale_space", "detect_features", "compute_descriptors")

    # True when the scale space is only built lazily inside detection and
    # description, so build_scale_space timings cover setup alone
    deferred_scale_space = False

    def __init__(self):
        self._completed = 0
        self._failed = False

    @property
    def completed_stages(self) -> Tuple[str, ...]:
        return self.STAGES[:self._completed]

    def _enter(self, stage: str) -> None:
        if self._failed:
            raise EngineError(f"cannot run {stage}: a previous stage failed")
        expected = self.STAGES[self._completed] if self._completed < len(self.STAGES) else None
        if stage != expected:
            raise EngineError(f"cannot run {stage}: expected {expected or 'no further stage'}")

    def _run(self, stage: str, func, *args):
        self._enter(stage)
        try:
            result = func(*args)
        except EngineError:
            self._failed = True
            raise
        except cv2.error as e:
            self._failed = True
            raise EngineError(f"{stage} failed: {e}") from e
        self._completed += 1
        return result

    def build_scale_space(self, image: np.ndarray, options: Options) -> None:
        self._run("build_scale_space", self._build, image, options)

    def detect_features(self) -> List[Keypoint]:
        return self._run("detect_features", self._detect)

    def compute_descriptors(self, keypoints: Sequence[Keypoint]) -> DescriptorResult:
        return self._run("compute_descriptors", self._describe, list(keypoints))

    def save_scale_space(self) -> None:
        """Export the scale space images, when the engine exposes them"""
        pass

    @abstractmethod
    def _build(self, image: np.ndarray, options: Options) -> None:
        ...

    @abstractmethod
    def _detect(self) -> List[Keypoint]:
        ...

    @abstractmethod
    def _describe(self, keypoints: List[Keypoint]) -> DescriptorResult:
        ...


class AKAZESession(FeatureEngine):
    """
    Feature engine backed by OpenCV's AKAZE implementation

    OpenCV fixes the scale offset, the derivative smoothing and the MLDB
    pattern size; non-default values for those options only produce a
    warning.
    """

    deferred_scale_space = True

    def __init__(self):
        super().__init__()
        self.options: Optional[Options] = None
        self._image: Optional[np.ndarray] = None
        self._akaze = None

    @staticmethod
    def descriptor_type(options: Options) -> int:
        if options.descriptor == DescriptorType.BINARY:
            return cv2.AKAZE_DESCRIPTOR_MLDB_UPRIGHT if options.upright else cv2.AKAZE_DESCRIPTOR_MLDB
        if options.descriptor == DescriptorType.REAL and not options.upright:
            return cv2.AKAZE_DESCRIPTOR_KAZE
        return cv2.AKAZE_DESCRIPTOR_KAZE_UPRIGHT

    @staticmethod
    def engine_descriptor_size(options: Options) -> int:
        """
        Descriptor size in bits as handed to OpenCV

        OpenCV only computes the full-length MLDB descriptor for three
        channels, so full length with fewer channels is requested as an
        explicit bit count.
        """
        if not options.is_binary:
            return options.descriptor_size
        full_bits = MLDB_BITS_PER_CHANNEL * options.descriptor_channels
        if options.descriptor_size > full_bits:
            raise EngineError(
                f"descriptor size {options.descriptor_size} exceeds the {full_bits} bits "
                f"available with {options.descriptor_channels} channel(s)")
        if options.descriptor_size == 0 and options.descriptor_channels < 3:
            return full_bits
        return options.descriptor_size

    def _build(self, image: np.ndarray, options: Options) -> None:
        if not options.has_image_size:
            raise EngineError("image size must be set before building the scale space")
        if image.ndim != 2 or image.shape != (options.img_height, options.img_width):
            raise EngineError(
                f"image shape {image.shape} does not match configured size "
                f"{options.img_width}x{options.img_height}")
        try:
            diffusivity = _DIFFUSIVITY_TO_CV[Diffusivity(options.diffusivity)]
        except ValueError:
            raise EngineError(f"unknown diffusivity type {options.diffusivity}")
        if options.omax < 1 or options.nsublevels < 1:
            raise EngineError(
                f"octaves ({options.omax}) and sublevels ({options.nsublevels}) must be positive")

        for name in ("soffset", "sderivatives", "descriptor_pattern_size"):
            if getattr(options, name) != getattr(DEFAULT_OPTIONS, name):
                print(f"Warning: {name} is fixed by the OpenCV AKAZE engine, "
                      f"value {getattr(options, name)} ignored")

        self._akaze = cv2.AKAZE_create(
            self.descriptor_type(options),
            self.engine_descriptor_size(options),
            options.descriptor_channels,
            float(options.dthreshold),
            options.omax,
            options.nsublevels,
            diffusivity,
        )
        self._image = np.ascontiguousarray(image, dtype=np.float32)
        self.options = options

    def _detect(self) -> List[Keypoint]:
        cv_keypoints = self._akaze.detect(self._image, None)
        return [Keypoint.from_cv(kp) for kp in cv_keypoints]

    def _describe(self, keypoints: List[Keypoint]) -> DescriptorResult:
        cv_keypoints = [kp.to_cv() for kp in keypoints]
        described, descriptors = self._akaze.compute(self._image, cv_keypoints)
        described = [Keypoint.from_cv(kp) for kp in described]

        if descriptors is None:
            dtype = np.uint8 if self.options.is_binary else np.float32
            descriptors = np.empty((0, descriptor_dimension(self.options)), dtype=dtype)
        if len(described) != descriptors.shape[0]:
            raise EngineError(
                f"engine returned {descriptors.shape[0]} descriptors for {len(described)} keypoints")

        indices = self._match_survivors(keypoints, described)
        return DescriptorResult(indices=indices, keypoints=described, descriptors=descriptors)

    @staticmethod
    def _match_survivors(detected: List[Keypoint], described: List[Keypoint]) -> List[int]:
        # Survivors keep their relative order; orientation may have been
        # refined during description, so only position, size and octave match.
        indices = []
        j = 0
        for kp in described:
            while j < len(detected) and not (
                    math.isclose(detected[j].x, kp.x, abs_tol=1e-4)
                    and math.isclose(detected[j].y, kp.y, abs_tol=1e-4)
                    and math.isclose(detected[j].size, kp.size, abs_tol=1e-4)
                    and detected[j].octave == kp.octave):
                j += 1
            if j == len(detected):
                raise EngineError(
                    f"described keypoint at ({kp.x:.2f}, {kp.y:.2f}) was never detected")
            indices.append(j)
            j += 1
        return indices

    def save_scale_space(self) -> None:
        print("Warning: the OpenCV AKAZE engine does not expose its nonlinear "
              "scale space, nothing was saved")
