"""Provider adapters -- one per external event source."""
