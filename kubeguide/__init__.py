"""kubeguide: unified Kubernetes resource accessor for the terminal browser."""

__version__ = "0.1.0"
