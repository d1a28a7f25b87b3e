"""
Shared config and logging helpers used by the chart engine, CLI and tests.
"""
