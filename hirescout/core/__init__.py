"""Core data model, resilience, filtering and deduplication."""
