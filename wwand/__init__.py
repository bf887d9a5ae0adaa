"""
wwand - WWAN modem reconciliation daemon
"""

__version__ = "0.1.0"
