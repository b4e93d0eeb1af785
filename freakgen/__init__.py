"""
FreakGEN - randomized patch generator for MicroFreak-class synthesizers.
"""

from .config import APP_VERSION

__version__ = APP_VERSION
