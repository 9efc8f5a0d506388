"""
Repair shop service desk: tickets, customers, technicians and reports
"""
__version__ = "0.1.0"
