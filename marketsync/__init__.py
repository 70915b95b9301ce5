"""marketsync: orchestration core for selling across eBay, Mercari and Facebook Marketplace."""

__version__ = "0.1.0"
