"""GNSS data processing: RINEX reading, broadcast orbits, cycle slips, differencing and filtering."""

__version__ = "1.2.0"