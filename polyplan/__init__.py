"""polyplan — polyhouse layout planning on irregular farm land."""

__version__ = "0.1.0"
