"""Property Scout: natural-language property search with scoring and market analysis."""

__version__ = "0.1.0"
