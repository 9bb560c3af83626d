"""Repository layer: keyed entity stores over sheet-like tabular ranges.

Generic CRUD lives in entity_repo; the *_repo modules supply the per-entity
row codecs and factories, so services never touch rows or SQL.
"""
