"""Services that load state through the repositories and run the engines."""
