"""
JSON export for hoptrace
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..models import HopResult, TraceResult
from .. import __version__


class JsonExporter:
    """
    Export trace results to JSON format.

    One entry per traced address family, each with its hop list.
    """

    def export(self, results: list[TraceResult],
               output_path: Optional[Path] = None) -> dict:
        """
        Export trace results to JSON.

        Args:
            results: Finished traces (IPv4 and/or IPv6)
            output_path: Optional file path to write

        Returns:
            JSON-serializable dict
        """
        data = {
            "meta": {
                "version": __version__,
                "generator": "hoptrace",
                "generated_at": datetime.now().isoformat()
            },
            "traces": [self._serialize_trace(result) for result in results]
        }

        if output_path:
            self._write_file(data, output_path)

        return data

    def _serialize_trace(self, result: TraceResult) -> dict:
        return {
            "hostname": result.hostname,
            "address": str(result.target),
            "family": result.target.label,
            "status": result.status.value,
            "reachable": result.reachable,
            "total_hops": result.total_hops,
            "timestamp": result.timestamp.isoformat(),
            "hops": [self._serialize_hop(hop) for hop in result.hops]
        }

    def _serialize_hop(self, hop: HopResult) -> dict:
        """Serialize a single hop"""
        return {
            "hop": hop.hop,
            "ip": hop.ip,
            "name": hop.name,
            "probes": [
                round(r, 2) if r is not None else None
                for r in hop.rtts
            ],
            "rtt_min": round(hop.rtt_min, 2) if hop.rtt_min is not None else None,
            "rtt_avg": round(hop.rtt_avg, 2) if hop.rtt_avg is not None else None,
            "rtt_max": round(hop.rtt_max, 2) if hop.rtt_max is not None else None,
            "reached_target": hop.reached_target
        }

    def _write_file(self, data: dict, path: Path):
        """Write JSON to file"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

