"""
taskgate: consent gate for tasks that run when a workspace folder is opened.
"""
