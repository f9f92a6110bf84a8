"""
Task index over tasks.json files.

Components:
- json_index.py: loads folder task sets and resolves configuring entries
- runner.py: starts resolved tasks as subprocesses
"""
