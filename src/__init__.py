"""
League Simulator

A round-robin football league simulator with standings, form tracking,
match simulation and season predictions.
"""

__version__ = "0.1.0"
__author__ = "League Simulator Team"
