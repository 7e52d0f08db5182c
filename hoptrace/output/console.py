"""
Rich console output for hoptrace - with real-time per-hop printing
"""

from typing import Optional
from rich.console import Console
from rich.text import Text

from ..models import HopResult, SessionStatus
from ..probe.prober import ProbeSession
from ..resolver import ResolvedHost


RTT_WIDTH = 9


class ConsoleOutput:
    """
    Rich console output for traceroute results.

    Features:
    - Address headers for the local and target host
    - Real-time per-hop output
    - Session outcome notices
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False)

    def print_addresses(self, host: ResolvedHost):
        """Print a host header followed by one line per address"""
        self.console.print(Text(f"{host.hostname} addresses", style="bold"))
        self.console.print()
        for target in host.addresses:
            line = Text()
            line.append(f"{target.label}: ", style="dim")
            line.append(str(target))
            self.console.print(line)
        self.console.print()

    def print_capability(self, label: str):
        """Announce that a trace over the given family will run"""
        self.console.print(Text(f"Can perform {label} Traceroute", style="bold cyan"))

    def print_hop(self, hop: HopResult):
        """Print a single hop result in real-time"""
        line = Text()
        line.append(f"{hop.hop:>2}  ", style="dim")

        for rtt in hop.rtts:
            if rtt is None:
                line.append(f"{'*':>{RTT_WIDTH}}", style="yellow")
            else:
                line.append(f"{self._format_rtt(rtt):>{RTT_WIDTH}}")
        line.append("  ")

        if hop.timed_out:
            line.append("Request timeout.", style="yellow")
        elif hop.name:
            line.append(hop.name, style="bold" if hop.reached_target else "")
            line.append(f" [{hop.ip}]", style="dim")
        else:
            line.append(hop.ip or "-", style="bold" if hop.reached_target else "")

        self.console.print(line)

    def print_outcome(self, session: ProbeSession):
        """Print why a session stopped, when it did not reach the target"""
        settings = session.prober.settings
        if session.status is SessionStatus.ABORTED:
            self.console.print(Text(
                f"{settings.max_consecutive_timeouts} consecutive timeouts, "
                "stopping traceroute.",
                style="red"
            ))
        elif session.status is SessionStatus.EXHAUSTED:
            self.console.print(Text(
                f"Target not reached within {settings.max_hops} hops.",
                style="red"
            ))

    def print_separator(self):
        self.console.print()

    def print_error(self, message: str):
        """Print error message"""
        self.console.print(Text.assemble(("Error:", "bold red"), f" {message}"))

    def _format_rtt(self, rtt: float) -> str:
        return f"{rtt:.0f} ms"
