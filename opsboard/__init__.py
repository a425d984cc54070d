"""
opsboard: metrics aggregation and projection engine for the marketing-ops
dashboard.
"""

__version__ = "1.0.0"
