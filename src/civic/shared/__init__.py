"""
Shared infrastructure: configuration-aware logging, database sessions and
application exceptions.
"""
