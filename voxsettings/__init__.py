"""voxsettings - Voice assistant settings sync and device monitoring."""

__version__ = "0.1.0"
