"""Shared infrastructure: settings, logging, exceptions, resilience."""
