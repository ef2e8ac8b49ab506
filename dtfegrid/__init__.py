"""Option handling, particle records, result containers and simplex splitting for DTFE grid interpolation."""

__version__ = "0.1.0"