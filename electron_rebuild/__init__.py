"""Rebuild native Node modules against Electron's headers and module ABI."""

__version__ = "0.1.0"
