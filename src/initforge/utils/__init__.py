"""Utility modules for initforge."""

from initforge.utils.file_ops import FileOperations

__all__ = ["FileOperations"]
