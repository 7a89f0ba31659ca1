"""dcprov: manage DRACOON customers through the provisioning API.

Commands live in ``main`` (Typer); ``client`` talks to the server and
``credentials`` keeps one service token per endpoint in the OS keyring.
"""

__all__ = ["__version__", "PROG_NAME"]

__version__ = "0.1.0"

PROG_NAME = "dcprov"
