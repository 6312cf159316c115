"""Concolic Tools - command line and witness tables."""
