"""RF cascade budget engine: gain, noise figure, compression, EIRP and G/T."""

__version__ = "0.1.0"
