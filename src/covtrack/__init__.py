"""Loan covenant compliance tracking."""

__version__ = "0.1.0"


def __getattr__(name):
    # The CLI pulls in click and the database layer, so load it on demand
    if name == "main":
        from covtrack.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
