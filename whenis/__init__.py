"""
whenis - pick the meeting slots that work for everybody.
"""

__version__ = "0.1.0"
