"""Core domain: constants, exceptions, result dataclasses and algorithms."""
