import math
import matplotlib.pyplot as plt
import numpy as np
import cv2
from typing import Optional, Sequence

from ..models.features import Keypoint


class FeatureVisualizer:
    """Overlay of detected keypoints on the source image"""

    def __init__(self, color: tuple = (0, 255, 0), orientation_color: tuple = (0, 0, 255)):
        """
        Args:
            color: BGR colour of the keypoint circles
            orientation_color: BGR colour of the orientation ticks
        """
        self.color = color
        self.orientation_color = orientation_color

    def draw_keypoints(self, gray: np.ndarray, keypoints: Sequence[Keypoint],
                       upright: bool = False) -> np.ndarray:
        """
        Draw keypoints on a BGR copy of a grayscale image

        Args:
            gray: 8-bit single channel image, left untouched
            keypoints: Keypoints to draw
            upright: Skip the orientation ticks

        Returns:
            New 3-channel image with the overlay
        """
        canvas = cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)

        for kp in keypoints:
            center = (int(round(kp.x)), int(round(kp.y)))
            radius = max(int(round(kp.size / 2.0)), 1)
            cv2.circle(canvas, center, radius, self.color, 1, cv2.LINE_AA)

            if not upright and kp.angle >= 0:
                theta = math.radians(kp.angle)
                tip = (int(round(kp.x + radius * math.cos(theta))),
                       int(round(kp.y + radius * math.sin(theta))))
                cv2.line(canvas, center, tip, self.orientation_color, 1, cv2.LINE_AA)

        return canvas

    def plot_features(self, gray: np.ndarray, keypoints: Sequence[Keypoint],
                      title: str = "AKAZE Features", upright: bool = False,
                      figsize: tuple = (12, 8), save_path: Optional[str] = None):
        """
        Show the keypoint overlay and block until the window is closed

        Args:
            gray: 8-bit single channel source image
            keypoints: Keypoints to draw
            title: Window title
            upright: Skip the orientation ticks
            figsize: Figure size
            save_path: Save the figure here instead of opening a window
        """
        overlay = self.draw_keypoints(gray, keypoints, upright=upright)

        plt.figure(figsize=figsize)
        plt.imshow(cv2.cvtColor(overlay, cv2.COLOR_BGR2RGB))
        plt.title(f"{title} ({len(keypoints)} keypoints)", fontsize=14, fontweight='bold')
        plt.axis('off')
        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"  Features plot saved to: {save_path}")
        else:
            plt.show()
        plt.close()
