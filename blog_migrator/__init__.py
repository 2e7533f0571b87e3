"""
Top-level package for the store-to-store blog migration utility.

This package bundles all components required to read blog articles from
a source store, split oversized bodies into well-formed parts, create the
articles on a target store and record what happened.  Modules are split
into subpackages:

* :mod:`blog_migrator.extractors` – listing and selecting source articles
* :mod:`blog_migrator.parsers` – markup-aware body splitting
* :mod:`blog_migrator.migrators` – Admin REST API interactions
* :mod:`blog_migrator.models` – payloads sent to the target store
* :mod:`blog_migrator.utils` – event logging, migration map and text helpers

Each layer has no direct knowledge of configuration or execution
strategy; orchestration is handled in the migration_tool.
"""
