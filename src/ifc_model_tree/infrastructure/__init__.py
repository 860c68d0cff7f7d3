"""Infrastructure Layer.

Adapters to IFC models on disk.
"""
