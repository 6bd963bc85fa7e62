"""
API Package - HTTP boundary of the gateway.
"""
