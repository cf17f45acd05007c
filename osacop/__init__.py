"""Feedback reconcilers, restart handling and resource helpers for compute instances, host pools and cluster orders."""

__version__ = "0.1.0"