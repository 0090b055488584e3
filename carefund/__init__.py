"""
CareFund risk engine.
Health risk scoring, multi-source data aggregation and insurance planning.
"""

__version__ = "2.0.0"
