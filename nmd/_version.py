"""
# NMD: _version.py

Licensed under "MIT No Attribution" (MIT-0), see LICENSE.

Version number.
"""

__version__ = '0.4.0'
