"""Flash loans and flash swaps against constant-product pairs on an in-memory contract runtime."""

__version__ = "0.1.0"
__all__ = ["__version__"]