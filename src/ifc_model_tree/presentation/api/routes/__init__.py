"""API Routes."""
from ifc_model_tree.presentation.api.routes import tree

__all__ = ["tree"]
