"""
Car Rental Manager: fleet, customers and rental agreements in one flat file.
"""
__version__ = "1.0.0"
