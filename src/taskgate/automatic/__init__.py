"""
Automatic (runOn=folderOpen) tasks.

Components:
- discovery.py: finds tasks marked to run on folder open (find_auto_tasks)
- gate.py: per-workspace consent, prompt flow and dispatch (RunAutomaticTasks)
"""
