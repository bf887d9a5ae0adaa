"""
Shared utilities: command runner and logging helpers
"""
