"""Configuration, event filters, explorer links, wallet aliases and a cache for a Cosmos transactions bot."""

__version__ = "0.1.0"