"""Settlement Notifier — default outbound sink for committed purchases.

Invariants:
    - Receives only committed settlements (called after the transaction closes)
    - Never raises into the settlement path; the engine guards the call

Design Decisions:
    - Logging sink as default: email or websocket delivery plugs in behind the same
      notify() signature without touching the engine
"""

import logging

from fantasy_market.core.market_events import SettlementCompleted

logger = logging.getLogger(__name__)


class LoggingSettlementNotifier:
    """Writes one structured INFO record per completed settlement."""

    async def notify(self, event: SettlementCompleted) -> None:
        logger.info(
            f"Player {event.player_id} transferred from {event.seller_id} "
            f"to {event.buyer_id} for {event.clearing_price:,}",
            extra=event.as_log_extra(),
        )
