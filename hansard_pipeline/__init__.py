"""
Hansard pipeline.

Ingests UK Parliament Hansard proceedings: resolves the latest sitting day,
crawls its section trees, assembles attributed proceeding records and
reconciles stored speaker names against the member registry.
"""

__version__ = "0.1.0"
