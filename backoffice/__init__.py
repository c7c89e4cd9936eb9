"""
Gaming Platform Back-Office Core

Reference-data cache, cascading hierarchy resolution, auth-readiness gating
and dashboard aggregation for the operator back-office.
"""

__version__ = "1.0.0"
