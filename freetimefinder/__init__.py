"""
freetimefinder - find common free time across several calendars.
"""

__version__ = "0.1.0"
