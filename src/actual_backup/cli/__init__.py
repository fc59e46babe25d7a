"""
Command Line Interface Package

Provides the actual-backup command:
- actual-backup --sync-id <id> [--backup-dir <path>] [--backup-filename <name>]
"""
