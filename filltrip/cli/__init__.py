"""
Command-line interface for FillTrip.
"""
