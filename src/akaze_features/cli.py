"""
Command line driver: detect AKAZE features in one image

Usage:
    akaze-features <image> [--output keypoints.txt] [--descriptor 2] ...

Run with ``--help`` for the full list of options.
"""

import sys
from typing import Optional, Sequence

from .exceptions import AKAZEFeaturesError, ConfigurationError
from .models.pipeline import PipelineResult, PipelineRunner
from .options import DescriptorType
from .parser import ParsedArguments, parse_input_options
from .utils.image_io import bind_image_size, load_image
from .utils.keypoint_io import save_keypoints
from .utils.visualization import FeatureVisualizer


def run(parsed: ParsedArguments, display: bool = True,
        runner: Optional[PipelineRunner] = None) -> PipelineResult:
    """
    Run the extraction pipeline for already parsed arguments

    Args:
        parsed: Result of ``parse_input_options``
        display: Open the keypoint overlay window at the end of the run
        runner: Pipeline runner to use, a default AKAZE runner when None

    Returns:
        PipelineResult of the run
    """
    options = parsed.options
    if options.verbosity:
        print("Check AKAZE options:")
        print(options)

    image = load_image(parsed.image_path)
    options = bind_image_size(options, image)

    runner = runner or PipelineRunner()
    result = runner.run(image.normalized, options)
    runner.show_computation_times(result)

    if options.save_keypoints:
        save_keypoints(parsed.output_path, result.features, binary=options.is_binary)
        print(f"Keypoints saved to: {parsed.output_path}")

    if display:
        FeatureVisualizer().plot_features(
            image.gray, result.features.keypoints,
            title=parsed.image_path,
            upright=options.upright or options.descriptor == DescriptorType.UPRIGHT_REAL)

    return result


def main(argv: Optional[Sequence[str]] = None, display: bool = True) -> int:
    """Entry point; returns the process exit status"""
    if argv is None:
        argv = sys.argv[1:]

    try:
        parsed = parse_input_options(argv)
    except ConfigurationError:
        # the parser already printed usage or the offending option
        return 1

    try:
        run(parsed, display=display)
    except AKAZEFeaturesError as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
