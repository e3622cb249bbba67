"""rolecheck: audit IAM policy statements against allow-lists, deny-lists and wildcard rules."""

__version__ = "0.3.0"
