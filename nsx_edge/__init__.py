"""
NSX Tier-1 Edge Cluster tooling.

- core/: Configuration, logging, exceptions, retry policy
- policy/: NSX Policy API client and the Tier-1 / Edge Cluster operations
- cli/: Command-line interface (Typer + Rich)
"""

__version__ = "0.1.0"
