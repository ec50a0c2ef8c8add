"""
Core: configuration, structured logging and exceptions.
"""
