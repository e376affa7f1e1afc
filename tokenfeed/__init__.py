"""TokenFeed: multi-source token feed and Solana swap quoting."""

__version__ = "0.1.0"
