"""
Test suite for HireScout.

Contains tests for:
- The scraper contract and each platform adapter
- Multi-platform aggregation and deduplication
- Configuration loading, models and the command line

Unit tests for filters, resilience and contact discovery live next to their
packages under hirescout/. Run everything with: pytest
"""
