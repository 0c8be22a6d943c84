"""
Monitoring module.

This package provides in-memory API performance metrics collection.
"""
