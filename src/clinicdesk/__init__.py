"""ClinicDesk access layer: permission model, sessions and API."""

__version__ = "0.1.0"
