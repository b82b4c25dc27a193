"""ClearFund: donation platform backend with organization transparency scoring."""

__version__ = "0.1.0"
