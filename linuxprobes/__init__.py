"""Nagios-compatible monitoring checks for Linux hosts: paging, swap, pressure stall, TCP, temperature, uptime, users and network."""

__version__ = "1.0.0"