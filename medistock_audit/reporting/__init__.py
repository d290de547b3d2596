"""
medistock_audit.reporting — Export and terminal formatting of stock movements.

Modules:
  export     — CSV artifact, report request building, renderer hand-off.
  renderers  — ReportRenderer protocol and the built-in JSON renderer.
  formatters — ASCII terminal formatters for Typer CLI commands.
"""
