"""
Core types: task models, ports (Protocols) and application state.
"""
