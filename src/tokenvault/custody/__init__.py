"""Custody records and the custody ledger."""
