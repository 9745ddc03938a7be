"""diff-sense: change analysis and risk engine for git workflows."""

__version__ = "0.1.0"
