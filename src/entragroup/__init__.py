"""entragroup - report the user members of a Microsoft Entra ID group."""

__version__ = "1.0.0"
