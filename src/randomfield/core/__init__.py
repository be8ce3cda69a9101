"""Core module with config, errors, logging and type aliases."""

__all__ = [
    "types",
    "errors",
    "logging",
    "config",
]
