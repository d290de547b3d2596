"""Audit-trail reconstruction for MediStock history logs.

Modules
-------
classifier  — ordered keyword rules: action label → MovementKind
extractor   — change amount, Stock: X → Y quantities and reason from details text
normalizer  — LogEntry → StockMovement (classifier + extractor)
filters     — date range / kind / text predicates over movements
aggregator  — per-window counts and most-active subjects
"""
