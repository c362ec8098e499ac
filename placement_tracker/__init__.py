"""
Placement Tracker - daily placement & internship reporting client.
"""

__version__ = "1.0.0"
