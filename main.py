"""
Ecosystem Simulator CLI entry point.

Usage:
    python main.py
    python main.py --config config/default_config.json --ticks 500
    python main.py --seed 7 --output runs --quiet
    python main.py --set climate.rainfall=2 --set population.rocks=0
    python main.py --ui
"""

import argparse
import sys
import time
from datetime import datetime
from pathlib import Path


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Ecosystem Simulator: plants, rocks, rain and fire on a bounded grid",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                        Run with default settings
  python main.py --config config/default_config.json    Run with a config file
  python main.py --ticks 200 --delay-ms 50              Short, slowed-down run
  python main.py --set climate.rainfall=2 --set run.max_ticks=0
  python main.py --ui                                   Launch Streamlit UI
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to JSON config file (default: built-in defaults)",
    )
    parser.add_argument(
        "--ui",
        action="store_true",
        help="Launch Streamlit web UI (ignores the other options)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override random seed (overrides config value)",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="Override tick limit (0 = run until extinction)",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=None,
        help="Override map reduction factor (must divide the board dimension)",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=None,
        help="Override delay between ticks in milliseconds",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write config, per-tick metrics and a summary under this directory",
    )
    parser.add_argument(
        "--set",
        action="append",
        default=None,
        metavar="SECTION.FIELD=VALUE",
        help="Override one config value, e.g. climate.rainfall=3 (repeatable)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not draw the map; print only the final result",
    )

    return parser.parse_args()


def launch_ui() -> None:
    """Launch the Streamlit web UI."""
    import subprocess
    ui_path = Path(__file__).parent / "ecosim" / "ui" / "app.py"
    if not ui_path.exists():
        print(f"Error: UI app not found at {ui_path}")
        sys.exit(1)
    subprocess.run(
        [
            sys.executable, "-m", "streamlit", "run", str(ui_path),
            "--server.port=8501",
            "--server.headless=true",
            "--browser.gatherUsageStats=false",
        ],
        check=True,
    )


def clear_screen() -> None:
    print("\x1b[2J\x1b[1;1H", end="")


def run_console(
    config_path: str | None = None,
    seed_override: int | None = None,
    max_ticks: int | None = None,
    scale: int | None = None,
    delay_ms: int | None = None,
    output_dir: str | None = None,
    quiet: bool = False,
    overrides: list[str] | None = None,
) -> None:
    """
    Run one simulation, drawing the map to the terminal every tick.

    Ctrl-C stops the run early; the metrics file is still closed and, with
    an output directory, a summary marked "interrupted" is written.

    Raises:
        ValueError: If the config, an override or the scale is invalid.
            Nothing is run and no output directory is created.
    """
    from ecosim.core.config import (
        apply_param_override,
        get_default_config,
        load_config,
        parse_param_override,
    )
    from ecosim.simulation.engine import SimulationEngine
    from ecosim.simulation.metrics import MetricsCollector
    from ecosim.logging.run_manager import RunManager

    config = load_config(config_path) if config_path else get_default_config()

    for text in overrides or []:
        key, value = parse_param_override(text)
        try:
            apply_param_override(config, key, value)
        except KeyError as e:
            raise ValueError(e.args[0]) from e
    if seed_override is not None:
        config.board.seed = seed_override
    if max_ticks is not None:
        config.run.max_ticks = max_ticks
    if delay_ms is not None:
        config.run.tick_delay_ms = delay_ms

    problems = config.validate()
    if problems:
        raise ValueError("Invalid configuration:\n" + "\n".join(f"  - {p}" for p in problems))

    map_scale = scale if scale is not None else config.map_scale
    dimension = config.board.dimension
    if map_scale < 1 or dimension % map_scale != 0:
        raise ValueError(
            f"scale {map_scale} does not evenly divide the board dimension {dimension}"
        )

    tick_max = config.run.max_ticks
    indent = "    "

    engine = SimulationEngine(config, seed=config.board.seed)
    engine.initialize()
    metrics = MetricsCollector()
    run_manager = RunManager(config, base_dir=output_dir) if output_dir else None

    def timestamp() -> str:
        if tick_max == 0:
            return f"{datetime.now()} tick: {engine.current_tick}"
        return f"{datetime.now()} tick: {engine.current_tick}/{tick_max}"

    pending_messages: list[str] = []
    engine.on_message = lambda text, _eng: pending_messages.append(text)

    def on_tick(tick: int, eng: SimulationEngine) -> None:
        kpis = metrics.collect(eng.world, eng.tick_stats)
        if run_manager is not None:
            run_manager.log_tick(kpis)
        if quiet:
            pending_messages.clear()
            return

        if config.viz.clear_screen:
            clear_screen()
        world_map = eng.render(map_scale)
        print(world_map.to_text(debug=config.viz.debug_axes))
        print(f"map_scale: {map_scale}")
        print(timestamp())
        for message in pending_messages:
            print(f"{indent}{message}")
        pending_messages.clear()
        if eng.world.rocks:
            print(f"{indent}{eng.world.rocks[0]}")
        print(
            f"{datetime.now()} ferns: {kpis['fern_count']} {kpis['fern_pct']:.1f}% "
            f"trees: {kpis['tree_count']} {kpis['tree_pct']:.1f}%"
        )
        print(f"{datetime.now()} plants: {kpis['plant_count']}/{kpis['plant_limit']}")

        delay = config.run.burn_delay_ms if eng.tick_stats.burning else config.run.tick_delay_ms
        if delay > 0:
            time.sleep(delay / 1000.0)

    engine.on_tick = on_tick

    interrupted = False
    start_time = time.time()
    try:
        engine.run()
    except KeyboardInterrupt:
        interrupted = True
        print(f"\n{datetime.now()} Interrupted at tick {engine.current_tick}.")
    finally:
        elapsed = time.time() - start_time
        if run_manager is not None:
            run_manager.finalize({
                "total_ticks": engine.current_tick,
                "final_plants": engine.alive_count,
                "extinct": engine.is_extinct,
                "extinction_tick": engine.extinction_tick,
                "interrupted": interrupted,
                "elapsed_seconds": round(elapsed, 2),
                "seed": config.board.seed,
            })

    if engine.is_extinct:
        print(f"{datetime.now()} Everything is extinct.")

    total_ticks = engine.current_tick
    ticks_per_second = total_ticks / elapsed if elapsed > 0 else float("inf")
    print()
    print("[Result]")
    print(f"  Ticks: {total_ticks}")
    print(f"  Final plants: {engine.alive_count}")
    print(f"  Extinct: {engine.is_extinct}")
    print(f"  Elapsed: {elapsed:.1f}s")
    print(f"  Ticks per second: {ticks_per_second:.1f}")
    if run_manager is not None:
        print(f"  Output saved to: {run_manager.run_dir}")


def main() -> None:
    args = parse_args()

    if args.ui:
        launch_ui()
        return

    try:
        run_console(
            args.config,
            seed_override=args.seed,
            max_ticks=args.ticks,
            scale=args.scale,
            delay_ms=args.delay_ms,
            output_dir=args.output,
            quiet=args.quiet,
            overrides=args.set,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
