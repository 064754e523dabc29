#!/usr/bin/env python3
"""
Script to extract AKAZE features from a single image
"""

import os
import sys

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from akaze_features.cli import main

if __name__ == "__main__":
    sys.exit(main())
