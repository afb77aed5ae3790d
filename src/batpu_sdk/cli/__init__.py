"""
BatPU SDK Command-Line Interface
================================

This package provides command-line tools for the BatPU SDK:

- **batasm**: BatPU-2 assembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["batasm"]
