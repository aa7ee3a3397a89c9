"""Tools for inspecting encoded badge packets."""

__all__ = ["analyze"]
