"""
Sketch2Print

Assemble a scene of 2D vector shapes and render it to PDF.
"""

__version__ = "0.1.0"
