"""PersonaBrief: designer personas and spoken briefings from free-text writing."""

__version__ = "0.1.0"
