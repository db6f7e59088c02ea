"""Proposal records and the governance engine."""
