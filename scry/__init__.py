"""scry: a terminal log viewer that asks a model to pick the layout."""

__version__ = "0.3.0"
