"""
Shorts Studio backend tests, laid out like the backend packages.
"""

import os
import sys

# Backend modules are imported top-level (config, models, climate, ...)
_backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)
