"""
Shorts generation pipeline package.

This package contains the core components for producing short-form videos:
- Scene calculation and scriptwriter payload assembly
- Script and image prompt generation
- Error handling for robust pipeline execution
"""

__version__ = "0.1.0"

from .error_handler import PipelineError, ErrorCode, should_retry

__all__ = [
    "PipelineError",
    "ErrorCode",
    "should_retry",
]
