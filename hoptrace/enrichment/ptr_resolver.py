"""
PTR (reverse DNS) resolver
"""

from typing import Optional

import dns.exception
import dns.resolver

from ..logging import get_logger


logger = get_logger("ptr")


class PTRResolver:
    """
    Reverse DNS lookups for hop addresses.

    A missing or failing PTR record is an ordinary outcome: ``lookup``
    returns None and the caller prints the raw address instead.
    """

    def __init__(self, timeout: float = 2.0,
                 resolver: Optional[dns.resolver.Resolver] = None):
        self.timeout = timeout
        self._resolver = resolver or dns.resolver.Resolver()
        self._resolver.timeout = timeout
        self._resolver.lifetime = timeout

    def lookup(self, ip: str) -> Optional[str]:
        """
        PTR lookup for a single IP.

        Args:
            ip: IPv4 or IPv6 address

        Returns:
            Hostname (without trailing dot) or None if not found
        """
        if not ip:
            return None

        try:
            answers = self._resolver.resolve_address(ip)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer,
                dns.resolver.NoNameservers, dns.exception.Timeout) as e:
            logger.debug("No PTR for %s: %s", ip, e.__class__.__name__)
            return None
        except dns.exception.DNSException as e:
            logger.debug("PTR lookup for %s failed: %s", ip, e)
            return None
        except ValueError:
            # not an IP literal
            return None

        for rdata in answers:
            return rdata.target.to_text(omit_final_dot=True)
        return None

    __call__ = lookup
