#!/usr/bin/env python3
"""
Main entry point for the codepulse module.
This allows running the module with: python -m codepulse
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
