"""Logging, prompting and external collaborators (registry, GitHub, git)."""
