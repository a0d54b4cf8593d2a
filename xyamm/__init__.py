"""
xyamm: constant-product pool accounting for two-asset liquidity pools
"""

__version__ = "0.1.0"
