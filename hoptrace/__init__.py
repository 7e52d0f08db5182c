"""
hoptrace - dual-stack traceroute

Discovers the router path to a host over IPv4 and IPv6 by sending ICMP
echo probes with increasing hop limits.
"""

__version__ = "1.0.0"
__author__ = "hoptrace"
