"""Category rewriting package."""

from pocketledger.categories.rewriter import CategoryRewriter

__all__ = ["CategoryRewriter"]
