"""
Extractors for the source store.

This subpackage provides functions to list, select and fetch the blog
articles of the source store, returning the raw article dictionaries
that the migration tool turns into target payloads.
"""
