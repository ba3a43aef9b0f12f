#!/usr/bin/env python3
# run.py - Entry point for the sprite sheet preview

import sys
import os

# Add src to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from nanosprite.main import main

if __name__ == "__main__":
    sys.exit(main())
