"""Command implementations for the importcost CLI."""
