"""Memberstack AI documentation: markdown catalog indexer and marker-delimited section installer."""

__version__ = "2.0.0"
