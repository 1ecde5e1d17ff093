"""Extract ingestion pipeline.

This package decodes yearly CSV extracts, parses them in parallel,
and writes normalized records through the store layer.
"""
