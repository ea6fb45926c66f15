"""Service layer for managing Docker containers, images, networks, volumes and system information through a caller-supplied engine layer."""

__version__ = "0.1.0"