"""
Sauvola binarization and background isolation for scanned documents.
"""

__version__ = "0.3.2"
