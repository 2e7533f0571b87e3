"""
Parsers used by the migration pipeline.

Currently this subpackage exposes ``split_html`` and its helpers from
:mod:`blog_migrator.parsers.html_splitter`.
"""

from .html_splitter import OversizedFragmentError, SplitWarning, split_html, split_text

__all__ = ["OversizedFragmentError", "SplitWarning", "split_html", "split_text"]
