#!/usr/bin/env python3
"""
Run HiveMind Workspace

Simple script to start the HiveMind Workspace with default configuration.
"""

import sys
from pathlib import Path

# Add current directory to Python path
sys.path.insert(0, str(Path(__file__).parent))

from hivemind.main import main

if __name__ == "__main__":
    main()
