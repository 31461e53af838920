"""Services built on top of the parser: registration, preview, summary, progress."""
