"""
bio-density: species-observation aggregation by watershed and trail.
"""

__version__ = "1.0.0"
