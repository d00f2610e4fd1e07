"""Declarative, idempotent convergence of a home directory toward a dotfiles repo."""

__version__ = "0.3.0"
