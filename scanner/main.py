"""Signal scanner — application entry point.

Boots the FastAPI internal server and provides the CLI entry point for
serving the API and for replaying a candle file through the scanner.
"""

import logging

from fastapi import FastAPI

from scanner.api.routers import router

app = FastAPI(title="Signal Scanner Internal API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("scanner")


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


# ── Replay ───────────────────────────────────────────────────────────────


def load_candles_csv(path: str):
    """Read a candle CSV into ``CandleData`` rows, oldest first.

    Expects ``timestamp, open, high, low, close, volume`` columns;
    ``timestamp`` may be epoch milliseconds or any date string pandas can
    parse.
    """
    import pandas as pd

    from scanner.strategy.models import CandleData

    df = pd.read_csv(path)
    missing = {"timestamp", "open", "high", "low", "close"} - set(df.columns)
    if missing:
        raise ValueError(f"Candle file {path} is missing column(s): {', '.join(sorted(missing))}")

    if not pd.api.types.is_numeric_dtype(df["timestamp"]):
        parsed = pd.to_datetime(df["timestamp"], utc=True)
        df["timestamp"] = (parsed - pd.Timestamp(0, tz="UTC")) // pd.Timedelta(milliseconds=1)
    if "volume" not in df.columns:
        df["volume"] = 0.0
    df = df.sort_values("timestamp")

    return [
        CandleData(
            timestamp=int(row.timestamp),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for row in df.itertuples(index=False)
    ]


def replay(config, candles, symbol: str, window_size: int = 500, daily_candle=None):
    """Feed *candles* one by one through a rolling window.

    Evaluates the strategy after every bar, the way a live feed would, and
    returns the list of ``SignalEvent`` objects raised along the way.
    """
    from scanner.strategy.engine import ConditionEngine
    from scanner.strategy.signals import build_signal_event
    from scanner.window import CandleWindow

    engine = ConditionEngine(config)
    window = CandleWindow(window_size)
    events = []

    for candle in candles:
        window.append(candle)
        result = engine.check(window.snapshot(), daily_candle)
        event = build_signal_event(symbol, config, result, candle)
        if event is not None:
            logger.info("%s %s @ %.8f: %s", symbol, event.type, event.price, event.details)
            events.append(event)

    logger.info("Replay complete: %d candle(s), %d signal(s).", len(candles), len(events))
    return events


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli(argv=None) -> None:
    """Parse CLI arguments and dispatch to the appropriate mode."""
    import argparse
    import json

    from scanner.config import load_config, load_indicator_config
    from scanner.models.indicator_config import DEFAULT_INDICATOR_CONFIG

    parser = argparse.ArgumentParser(description="Signal scanner")
    parser.add_argument(
        "--mode",
        choices=["serve", "scan"],
        default="serve",
        help="Run the API server or replay a candle file (default: serve)",
    )
    parser.add_argument("--candles", help="Candle CSV for scan mode")
    parser.add_argument("--symbol", default="UNKNOWN", help="Symbol label for scan mode")
    parser.add_argument("--config", help="Indicator config JSON (default: SCANNER_CONFIG_PATH)")
    args = parser.parse_args(argv)

    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.mode == "serve":
        import uvicorn

        from scanner.api.routers import configure_routers

        configure_routers(target_volume=config.target_volume)
        logger.info("Starting scanner API on port %d", config.api_port)
        uvicorn.run(app, host="0.0.0.0", port=config.api_port, log_level="info")
        return

    if not args.candles:
        parser.error("--candles is required in scan mode")

    import os

    config_path = args.config or config.config_path
    if os.path.isfile(config_path):
        indicator_config = load_indicator_config(config_path)
    else:
        logger.warning("No indicator config at %s, using defaults.", config_path)
        indicator_config = DEFAULT_INDICATOR_CONFIG

    candles = load_candles_csv(args.candles)
    events = replay(indicator_config, candles, args.symbol, config.window_size)
    for event in events:
        print(json.dumps(event.to_dict()))


if __name__ == "__main__":
    _run_cli()
