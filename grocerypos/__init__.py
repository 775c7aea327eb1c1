"""
Grocery POS: single-register point of sale.
"""

__version__ = "1.0.0"
