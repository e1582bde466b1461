"""Multi-provider event search aggregation."""
