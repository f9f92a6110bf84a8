"""
SQLite-backed key-value storage with global and workspace scopes.
"""
