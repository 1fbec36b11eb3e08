"""BLIND AID voice interaction core."""

__version__ = "0.1.0"
