"""rampa - accessibility reports with community usefulness votes."""

__version__ = "0.1.0"
