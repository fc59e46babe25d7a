"""
Test Fixtures and Utilities

Shared test doubles and synthetic budget data.

This module provides:
- A fake acquisition adapter with configurable output and failures
- Synthetic budget zip files shaped like the sync server's downloads

All test data is synthetic and does not contain real financial information.
"""
