"""Configuration, errors, logging, metrics, events, arithmetic and storage."""
