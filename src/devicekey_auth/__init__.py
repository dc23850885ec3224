"""Device-key authentication service: password login plus signed-challenge session renewal."""

__version__ = "0.1.0"
