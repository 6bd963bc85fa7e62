"""
Assistant Gateway - tool-orchestrating conversational model service.
"""

__version__ = "1.0.0"
