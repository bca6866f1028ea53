"""Transformers for converting source data to content manifests."""

from .base import Transformer

__all__ = ["Transformer"]
