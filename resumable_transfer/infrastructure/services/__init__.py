"""
Infrastructure service implementations.
"""
