"""Command line interface for building, inspecting and sampling cached fields."""

__all__ = []
