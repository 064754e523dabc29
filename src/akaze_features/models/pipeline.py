import numpy as np
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from ..exceptions import EngineError
from ..options import Options
from ..utils.timer import Timer
from .engine import AKAZESession, FeatureEngine
from .features import Features


@dataclass
class PipelineResult:
    """Features of one run and the time spent in each engine stage (ms)"""
    features: Features
    timings: Dict[str, float] = field(default_factory=dict)
    deferred_scale_space: bool = False

    @property
    def detection_ms(self) -> float:
        return self.timings["build_scale_space"] + self.timings["detect_features"]

    @property
    def description_ms(self) -> float:
        return self.timings["compute_descriptors"]


class PipelineRunner:
    """
    Drives a feature engine through its three stages

    1. Nonlinear scale space construction
    2. Keypoint detection
    3. Descriptor computation

    Each stage is timed on its own; the timer covers the engine call only.
    """

    def __init__(self, engine_factory: Callable[[], FeatureEngine] = AKAZESession):
        """
        Args:
            engine_factory: Creates a fresh engine session for every run
        """
        self.engine_factory = engine_factory
        self.engine: Optional[FeatureEngine] = None

    def run(self, image: np.ndarray, options: Options) -> PipelineResult:
        """
        Extract features from a normalized image

        Args:
            image: float32 single channel image in [0, 1]
            options: Frozen options with the image size already bound

        Returns:
            PipelineResult with the keypoints that received a descriptor
        """
        if not options.has_image_size:
            raise EngineError("image size must be set before running the engine")

        self.engine = self.engine_factory()
        timings = {}

        if options.verbosity:
            print("Building nonlinear scale space...")
        with Timer("build_scale_space") as timer:
            self.engine.build_scale_space(image, options)
        timings[timer.name] = timer.elapsed_ms

        if options.verbosity:
            print("Detecting keypoints...")
        with Timer("detect_features") as timer:
            keypoints = self.engine.detect_features()
        timings[timer.name] = timer.elapsed_ms

        if options.verbosity:
            print(f"Detected {len(keypoints)} keypoints, computing descriptors...")
        with Timer("compute_descriptors") as timer:
            described = self.engine.compute_descriptors(keypoints)
        timings[timer.name] = timer.elapsed_ms

        features = Features.from_stage_output(keypoints, described)
        if options.verbosity and len(features) < len(keypoints):
            print(f"Description dropped {len(keypoints) - len(features)} keypoints")

        if options.save_scale_space:
            self.engine.save_scale_space()

        return PipelineResult(features=features, timings=timings,
                              deferred_scale_space=self.engine.deferred_scale_space)

    @staticmethod
    def show_computation_times(result: PipelineResult) -> None:
        print(f"Number of points: {len(result.features)}")
        if result.deferred_scale_space:
            print(f"Time Engine Setup: {result.timings['build_scale_space']:.3f} ms")
            print(f"Time Detector: {result.detection_ms:.3f} ms (includes scale space construction)")
            print(f"Time Descriptor: {result.description_ms:.3f} ms (includes scale space rebuild)")
        else:
            print(f"Time Scale Space: {result.timings['build_scale_space']:.3f} ms")
            print(f"Time Detector: {result.detection_ms:.3f} ms")
            print(f"Time Descriptor: {result.description_ms:.3f} ms")
