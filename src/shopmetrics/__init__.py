"""Shop metrics: sales-rate aggregation over a pluggable data source."""

__version__ = "0.1.0"
