"""
Larder household inventory tracker.

The package tracks perishable items across storage areas, handles the merge/open
lifecycle of pantry records, and wraps OCR, LLM and recipe-directory collaborators.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
