"""Portfolio website backend: data layer with cloud failover and admin API."""

__version__ = "1.0.0"
