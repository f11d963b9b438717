"""Helpers shared by the command line client."""
