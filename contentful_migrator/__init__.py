"""
Top-level package for the review-post → Contentful migration utility.

This package bundles all components required to read the static post
export, resolve image assets, create the linked ``seo``/``productInfo``/
``scores`` entries, assemble and publish ``reviewPost`` entries, and keep
per-phase checkpoints so interrupted runs can resume.  Modules are split
into subpackages:

* :mod:`contentful_migrator.extractors` – reading the JSON export
* :mod:`contentful_migrator.models` – source and target records
* :mod:`contentful_migrator.parsers` – review post assembly and HTML → Markdown
* :mod:`contentful_migrator.migrators` – Contentful API interactions per phase
* :mod:`contentful_migrator.updaters` – one-off maintenance passes over the space
* :mod:`contentful_migrator.utils` – logging, event reports, checkpoints, field coercion

Orchestration is handled in :mod:`contentful_migrator.migration_tool`.
"""
