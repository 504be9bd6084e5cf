"""FairPrice - multi-model fair-value engine and value screens for Korean equities."""

__version__ = "0.1.0"
