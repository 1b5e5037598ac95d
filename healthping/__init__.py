"""
healthping - UDP liveness/control listener
"""

__version__ = "1.0.0"
