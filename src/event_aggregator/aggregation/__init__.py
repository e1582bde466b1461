"""Aggregation pipeline -- configuration, filters and the orchestrator."""
