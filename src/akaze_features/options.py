from dataclasses import dataclass, replace
from enum import IntEnum

from .exceptions import EngineError


class Diffusivity(IntEnum):
    """Conductance functions for the nonlinear diffusion"""
    PM_G1 = 0
    PM_G2 = 1
    WEICKERT = 2
    CHARBONNIER = 3


class DescriptorType(IntEnum):
    """Descriptor families selectable from the command line"""
    UPRIGHT_REAL = 0
    REAL = 1
    BINARY = 2


@dataclass(frozen=True)
class Options:
    """
    AKAZE settings for a single run

    Built once by the command line parser and never modified afterwards.
    The image dimensions stay at zero until the input image is loaded and
    are bound with ``with_image_size``.
    """
    soffset: float = 1.6
    omax: int = 4
    nsublevels: int = 4
    dthreshold: float = 0.001
    diffusivity: int = int(Diffusivity.PM_G2)
    descriptor: int = int(DescriptorType.BINARY)
    descriptor_size: int = 0
    descriptor_channels: int = 3
    descriptor_pattern_size: int = 10
    sderivatives: float = 1.0
    upright: bool = False
    save_scale_space: bool = False
    save_keypoints: bool = False
    verbosity: bool = False
    img_width: int = 0
    img_height: int = 0

    @property
    def is_binary(self) -> bool:
        return self.descriptor == DescriptorType.BINARY

    @property
    def has_image_size(self) -> bool:
        return self.img_width > 0 and self.img_height > 0

    def with_image_size(self, width: int, height: int) -> "Options":
        """
        Return a copy with the image dimensions bound

        Args:
            width: Image width in pixels
            height: Image height in pixels

        Returns:
            New Options instance; this one is left untouched
        """
        if self.has_image_size:
            raise EngineError(
                f"image size already set to {self.img_width}x{self.img_height}")
        if width <= 0 or height <= 0:
            raise EngineError(f"invalid image size {width}x{height}")
        return replace(self, img_width=int(width), img_height=int(height))

    def __str__(self) -> str:
        try:
            diffusivity = Diffusivity(self.diffusivity).name
        except ValueError:
            diffusivity = f"unknown ({self.diffusivity})"
        lines = [
            f"  Scale offset: {self.soffset}",
            f"  Max octaves: {self.omax}",
            f"  Sublevels per octave: {self.nsublevels}",
            f"  Detector threshold: {self.dthreshold}",
            f"  Diffusivity: {diffusivity}",
            f"  Descriptor: {DescriptorType(self.descriptor).name}",
            f"  Descriptor size: {self.descriptor_size}",
            f"  Descriptor channels: {self.descriptor_channels}",
            f"  Descriptor pattern size: {self.descriptor_pattern_size}",
            f"  Derivative smoothing sigma: {self.sderivatives}",
            f"  Upright: {self.upright}",
            f"  Save scale space: {self.save_scale_space}",
            f"  Save keypoints: {self.save_keypoints}",
            f"  Image size: {self.img_width}x{self.img_height}",
        ]
        return "\n".join(lines)


DEFAULT_OPTIONS = Options()

DEFAULT_OUTPUT_PATH = "../output/files/keypoints.txt"
