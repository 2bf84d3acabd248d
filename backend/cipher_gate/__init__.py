"""Cipher gate: scroll-to-unlock landing gate engine and its collaborators."""
