# jinplate/core/__init__.py
"""Core rendering pipeline: alias resolution, context building, output naming,
template gathering and execution."""
