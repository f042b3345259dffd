"""
Appointment availability engine for clinic scheduling.
"""

__version__ = "0.3.0"
