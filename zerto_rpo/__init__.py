"""Zerto RPO check package.

A small command-line check that logs in to a Zerto Virtual Manager REST API,
fetches the VPG list and prints the average ActualRPO across all VPGs.
"""

__version__ = "0.1.0"
