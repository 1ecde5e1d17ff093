"""Normalized relational store.

This package owns the SQLite schema, categorical dictionaries,
provenance aggregation, and the import log.
"""
