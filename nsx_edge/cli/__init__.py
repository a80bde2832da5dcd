"""
CLI Module.

Command-line client built with Typer for operating on an NSX Manager.

Architecture:
- CLI is a thin presentation layer
- All NSX logic lives in nsx_edge.policy
- Settings are loaded once per run and carried on the Click context
"""
