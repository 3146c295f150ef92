"""
Core modules for FillTrip.

This package contains unit conversion, fuel cost calculation, the vehicle
catalog and search, trip recording, and monthly log aggregation.
"""
