"""
bookinglimits - hide marketplace listings whose recurring booking limits are exhausted.
"""

__version__ = "0.1.0"
