"""
Shared infrastructure: configuration, logging, scheduling.
"""
