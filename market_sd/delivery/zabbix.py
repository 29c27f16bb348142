"""Zabbix sender input file: one ``<host> <item_key> <0|1>`` line per market."""

from collections.abc import Sequence
from pathlib import Path
from typing import Union

from ..data.models import MarketConfig, Resolution
from .base import BaseOutputWriter, WriteResult

DEFAULT_HOST = "MarketSchedule"


def format_sender_line(host: str, item_key: str, value: int) -> str:
    """Format one sender line; value is 1 for OPEN, 0 for CLOSED."""
    return f"{host} {item_key} {value}"


class ZabbixSenderWriter(BaseOutputWriter):
    """Writes the sender input consumed by ``zabbix_sender -i``."""

    def __init__(self, output_path: Union[str, Path], host: str = DEFAULT_HOST):
        self.output_path = Path(output_path)
        super().__init__("zabbix_sender", self.output_path.parent)
        self.host = host

    def describe(self) -> str:
        return f"zabbix sender input at {self.output_path}"

    def render(self, markets: Sequence[MarketConfig], resolutions: Sequence[Resolution]) -> list[str]:
        by_id = {r.market_id: r for r in resolutions}
        return [
            format_sender_line(self.host, market.item_key, by_id[market.id].value)
            for market in markets
            if market.id in by_id
        ]

    def write(self, markets: Sequence[MarketConfig], resolutions: Sequence[Resolution]) -> WriteResult:
        """
        Write sender lines in allowlist order.

        The file is rewritten on every run whether or not any state changed.
        """
        result = self.write_lines(self.output_path, self.render(markets, resolutions))
        self.logger.info("Wrote sender input", output_path=str(result.path), lines=result.lines)
        return result
