"""feedrelay: republish video-search API endpoints as one subscription feed.

Two independent paths share the configuration document: an HTTP relay that
serves the document (raw, proxy-rewritten, or Base58-encoded) and passes
arbitrary requests through, and a health check that probes every endpoint and
keeps a rolling markdown report.
"""

__version__ = "1.0.0"
