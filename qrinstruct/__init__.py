"""
QR Instruct API: QR codes that lead rental guests to item instructions.
"""

__version__ = "1.0.0"
