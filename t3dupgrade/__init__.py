"""Parse legacy T3D level exports and upgrade their actors to the newer T3D layout."""

__version__ = "0.1.0"