"""Domain layer for famledger application."""
