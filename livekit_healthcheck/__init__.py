"""
LiveKit Healthcheck - joins a throwaway room to prove the server is alive.
"""

__version__ = "1.0.0"
