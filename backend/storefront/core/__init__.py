"""
Core infrastructure: configuration, database, logging, security.
"""
