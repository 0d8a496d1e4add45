"""
poamctl command-line interface.
"""
