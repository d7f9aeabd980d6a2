"""Twig command-line interface (``twig`` console script)."""
