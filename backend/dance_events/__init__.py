"""Dance Events API: event listings and ticketing for dancers, studios and agencies."""

__version__ = "1.0.0"
