"""Payload models sent to the target store."""

from .article import ArticlePayload, MetafieldPayload

__all__ = ["ArticlePayload", "MetafieldPayload"]
