"""Ninja Pirate Zombie Robot: rules engine and computer opponent."""

__version__ = "0.1.0"
