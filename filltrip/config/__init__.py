"""
Configuration loading for FillTrip.
"""
