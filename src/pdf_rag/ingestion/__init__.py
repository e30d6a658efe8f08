"""
Ingestion — PDF loading, chunking, batched embedding and indexing.

This package turns a set of uploaded PDF files into a ready store: one
vector collection plus one registry record, created atomically.
"""
