"""Application Layer.

Services that build, filter and serve the model structure tree.
"""
