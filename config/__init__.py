"""
Configuration package for the storage toolkit.
"""
