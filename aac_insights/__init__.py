"""
AAC usage insights: detects when a child's daily AAC usage departs from
their own historical baseline.
"""

__version__ = "0.1.0"
