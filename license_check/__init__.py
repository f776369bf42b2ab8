"""
license_check: audit a vendor tree for third-party license compliance.
"""

__version__ = "0.1.0"
