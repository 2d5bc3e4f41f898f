"""API client modules for external data sources.

Available clients:
- ``disease_sh`` -- COVID-19 statistics per country and global aggregate
"""
