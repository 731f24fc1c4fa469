"""Flask REST API for the expense ledger."""
