"""
Ingestion layer — loads already-fetched history entries and medicine names.

Submodules:
  history_file — JSON / CSV exports of the history collection → LogEntry list,
                 and the medicines name map used by the statistics ranking.
"""
