"""Sandbox Purge: notify, purge and recreate ageing sandbox spaces."""

__version__ = "0.1.0"
