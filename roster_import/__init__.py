"""CSV bulk import of attendee/user rosters into a hosted user store."""

__version__ = "0.1.0"
