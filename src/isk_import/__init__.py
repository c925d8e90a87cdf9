"""
ISK Import Report
Turns donation-log screenshots dropped in Google Drive into rows of a
Google Sheet.
"""

__version__ = "1.0.0"
