"""
FillTrip: trip fuel cost calculation and vehicle efficiency lookup.
"""

__version__ = "0.1.0"
