"""
hoptrace - dual-stack traceroute

Entry point for running as a module:
    python -m hoptrace <hostname>
"""

from .cli import main

if __name__ == '__main__':
    main()
