from __future__ import annotations

import argparse
from datetime import datetime, timezone

from feed_engine.data.resolution import Resolution
from feed_engine.data.symbol import SecurityType, Symbol
from feed_engine.runtime.host import EngineHost
from feed_engine.utils.config import load_engine_config
from feed_engine.utils.logger import get_logger, init_logging, log_info

_LOGGER = get_logger(__name__)


def _parse_subscription(raw: str) -> tuple[str, Symbol, Resolution]:
    """'add:SPY:daily' adds a subscription, 'remove:SPY' drops every user subscription for SPY."""
    op, _, rest = raw.partition(":")
    ticker, _, resolution = rest.partition(":")
    if op not in ("add", "remove") or not ticker:
        raise argparse.ArgumentTypeError(f"expected add:TICKER:resolution or remove:TICKER, got {raw!r}")
    try:
        return op, Symbol.create(ticker, SecurityType.EQUITY), Resolution.parse(resolution or "minute")
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Replay subscription events through the engine host.")
    parser.add_argument("events", nargs="*", type=_parse_subscription, default=[])
    parser.add_argument("--config", default="configs/engine.json")
    parser.add_argument("--logging", default="configs/logging.json")
    args = parser.parse_args(argv)

    cfg = load_engine_config(args.config)
    run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    init_logging(args.logging, run_id=run_id, mode=cfg.mode.value)

    host = EngineHost.from_config(cfg)
    for op, symbol, resolution in args.events:
        if op == "add":
            host.add_security(symbol, resolution)
        else:
            host.remove_security(symbol)
    host.heartbeat()

    frame = host.subscription_configs.to_frame()
    log_info(_LOGGER, "Final subscription state", rows=len(frame))
    print(frame.to_string(index=False))


if __name__ == "__main__":
    main()
