"""ShiftEase - event scheduling and volunteer registration service"""

__version__ = "1.0.0"
