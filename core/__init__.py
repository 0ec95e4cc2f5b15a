"""Core module - schema discovery and leave-metrics engine.

This module contains the canonical holiday/state models, the date utilities,
collection classification, field discovery, record normalization and the
leave metrics engine. It is intentionally CMS-transport agnostic.

Webflow HTTP access belongs in /connectors/.
"""

__version__ = "1.0.0"
