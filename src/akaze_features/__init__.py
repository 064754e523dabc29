"""akaze_features - AKAZE local feature extraction from the command line"""

__version__ = "1.0.0"
__author__ = "AKAZE Features Team"

from .models.engine import AKAZESession, FeatureEngine
from .models.pipeline import PipelineRunner
from .options import DEFAULT_OPTIONS, Options
from .parser import parse_input_options
from .utils.visualization import FeatureVisualizer

__all__ = ['AKAZESession', 'FeatureEngine', 'PipelineRunner', 'DEFAULT_OPTIONS',
           'Options', 'parse_input_options', 'FeatureVisualizer']
