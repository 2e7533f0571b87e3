"""
Store API migrators and helpers.

This subpackage provides functions to interact with the Shopify Admin
REST API for reading blogs, articles and metafields and for creating
them on the target store.  It encapsulates rate limiting, automatic
retries, header injection and cursor pagination.
"""
