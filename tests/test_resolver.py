"""Tests for forward address resolution."""

import socket
from unittest.mock import patch

import pytest

from hoptrace.models import Target
from hoptrace.resolver import ResolutionError, ResolvedHost, resolve, resolve_local


def addrinfo(*addresses):
    infos = []
    for addr in addresses:
        family = socket.AF_INET6 if ':' in addr else socket.AF_INET
        sockaddr = (addr, 0, 0, 0) if family == socket.AF_INET6 else (addr, 0)
        for socktype in (socket.SOCK_STREAM, socket.SOCK_DGRAM):
            infos.append((family, socktype, 0, '', sockaddr))
    return infos


class TestResolve:
    """Tests for resolve()."""

    def test_splits_families(self):
        with patch('hoptrace.resolver.socket.getaddrinfo',
                   return_value=addrinfo('93.184.216.34', '2606:2800:220:1::1')):
            host = resolve('example.com')

        assert host.hostname == 'example.com'
        assert host.addresses == [
            Target.parse('93.184.216.34'), Target.parse('2606:2800:220:1::1')
        ]
        assert host.ipv4 == Target.parse('93.184.216.34')
        assert host.ipv6 == Target.parse('2606:2800:220:1::1')

    def test_deduplicates(self):
        with patch('hoptrace.resolver.socket.getaddrinfo',
                   return_value=addrinfo('192.0.2.1', '192.0.2.1')):
            host = resolve('dup.example')
        assert len(host.addresses) == 1

    def test_last_address_per_family_used(self):
        with patch('hoptrace.resolver.socket.getaddrinfo',
                   return_value=addrinfo('192.0.2.1', '192.0.2.2')):
            host = resolve('multi.example')
        assert host.ipv4 == Target.parse('192.0.2.2')
        assert host.ipv6 is None
        assert host.pair() == (Target.parse('192.0.2.2'), None)

    def test_scoped_link_local(self):
        with patch('hoptrace.resolver.socket.getaddrinfo',
                   return_value=addrinfo('fe80::1%eth0')):
            host = resolve('router.local')
        assert str(host.ipv6) == 'fe80::1'

    def test_unresolvable_raises(self):
        with patch('hoptrace.resolver.socket.getaddrinfo',
                   side_effect=socket.gaierror(-2, 'Name or service not known')):
            with pytest.raises(ResolutionError, match='nosuchhost.invalid'):
                resolve('nosuchhost.invalid')

    def test_no_ip_addresses_raises(self):
        with patch('hoptrace.resolver.socket.getaddrinfo', return_value=[]):
            with pytest.raises(ResolutionError):
                resolve('empty.example')


class TestResolveLocal:
    """Tests for resolve_local()."""

    def test_resolves_own_hostname(self):
        with patch('hoptrace.resolver.socket.gethostname', return_value='box'), \
             patch('hoptrace.resolver.socket.getaddrinfo',
                   return_value=addrinfo('10.1.2.3')) as gai:
            host = resolve_local()
        gai.assert_called_once_with('box', None)
        assert host.hostname == 'box'
        assert host.ipv4 == Target.parse('10.1.2.3')

    def test_failure_gives_empty_host(self):
        with patch('hoptrace.resolver.socket.gethostname', return_value='box'), \
             patch('hoptrace.resolver.socket.getaddrinfo',
                   side_effect=socket.gaierror(-2, 'Name or service not known')):
            host = resolve_local()
        assert host == ResolvedHost(hostname='box')
        assert host.pair() == (None, None)


class TestTarget:
    """Tests for the Target value type."""

    def test_ipv4(self):
        target = Target.parse('192.0.2.1')
        assert target.version == 4
        assert target.label == 'IPv4'
        assert target.family == socket.AF_INET
        assert str(target) == '192.0.2.1'

    def test_ipv6(self):
        target = Target.parse('2001:db8::1')
        assert target.version == 6
        assert target.label == 'IPv6'
        assert target.family == socket.AF_INET6

    def test_immutable_and_hashable(self):
        target = Target.parse('192.0.2.1')
        with pytest.raises(AttributeError):
            target.address = None
        assert {target, Target.parse('192.0.2.1')} == {target}

    def test_invalid(self):
        with pytest.raises(ValueError):
            Target.parse('not-an-ip')
