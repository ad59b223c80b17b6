from .resolver import ExpressionResolver

__all__ = ["ExpressionResolver"]
