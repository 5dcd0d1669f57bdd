"""
Shared runtime helpers: settings, logging, database engine and table definitions.
"""
