"""
Infrastructure layer containing configuration, logging and service implementations.

This layer provides concrete implementations of the interfaces defined
in the core layer.
"""
