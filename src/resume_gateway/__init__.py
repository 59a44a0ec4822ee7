"""
Resume Gateway package.

This module provides a FastAPI application that turns prompts, uploaded
resumes and raw LaTeX into LaTeX source or rendered PDFs.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
