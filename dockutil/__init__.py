"""dockutil - narrow command-line mediator for the container runtime daemon."""

__version__ = "0.3.0"
