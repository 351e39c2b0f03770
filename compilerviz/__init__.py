"""Simulated C compiler pipeline served as data for a 3D visualizer."""

__version__ = "0.1.0"
