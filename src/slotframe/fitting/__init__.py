"""
Fitting Package

Auto-fitting of replacement text into slot boxes.
"""

from .text_fitter import FitOverflowWarning, FitResult, TextFitter

__all__ = ["FitOverflowWarning", "FitResult", "TextFitter"]
