"""
Cetus CLMM Position Rebalancer

Стратегия "центрированный диапазон":
- Позиция держится вокруг текущей цены пула
- Пока цена в диапазоне или рядом с ним, ничего не делаем
- Решительный выход за границу -> закрыть позицию и открыть новую вокруг цены
"""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from config import DEFAULT_RANGE_WIDTH_PERCENT, load_config_from_env
from rebalancer.bot import RebalancingBot
from rebalancer.exceptions import RebalancerError
from rebalancer.math.ticks import tick_to_price
from rebalancer.ranges import calculate_tick_range


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def cmd_range(args) -> int:
    """Офлайн-калькулятор нового диапазона."""
    tick_range = calculate_tick_range(args.tick, args.width, args.spacing)
    price_lower = tick_to_price(tick_range.tick_lower)
    price_upper = tick_to_price(tick_range.tick_upper)

    print("\n" + "=" * 60)
    print("CENTERED RANGE")
    print("=" * 60)
    print(f"Current tick:  {args.tick}")
    print(f"Tick spacing:  {args.spacing}")
    print(f"Width:         {args.width}%")
    print(f"Range:         {tick_range}")
    print(f"Raw prices:    {price_lower:.10f} - {price_upper:.10f}")
    print(f"Actual width:  {(price_upper / price_lower - 1) * 100:.4f}%")
    return 0


def cmd_check(args) -> int:
    """Один цикл проверки (и ребаланса, если нужен)."""
    bot = RebalancingBot(load_config_from_env())
    plan = bot.check_and_rebalance()
    if plan is None:
        print("No rebalance needed")
    else:
        print(f"Rebalanced into {plan.new_range}")
    return 0


def cmd_run(args) -> int:
    """Бесконечный цикл опроса."""
    bot = RebalancingBot(load_config_from_env())
    try:
        bot.run(max_cycles=args.cycles)
    except KeyboardInterrupt:
        bot.stop()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cetus CLMM position rebalancer")
    parser.add_argument("--env-file", default=".env", help="Path to .env file")
    parser.add_argument("--log-level", default=None, help="DEBUG/INFO/WARNING (default: LOG_LEVEL env)")
    sub = parser.add_subparsers(dest="command")

    run = sub.add_parser("run", help="Poll and rebalance until stopped")
    run.add_argument("--cycles", type=int, default=None, help="Stop after N cycles")
    run.set_defaults(func=cmd_run)

    check = sub.add_parser("check", help="Run a single check cycle")
    check.set_defaults(func=cmd_check)

    calc = sub.add_parser("range", help="Calculate a centered range offline")
    calc.add_argument("--tick", type=int, required=True, help="Current pool tick")
    calc.add_argument("--spacing", type=int, required=True, help="Pool tick spacing")
    calc.add_argument("--width", type=float, default=DEFAULT_RANGE_WIDTH_PERCENT, help="Range width, %%")
    calc.set_defaults(func=cmd_range)

    return parser


def main(argv=None) -> int:
    """Главная функция."""
    parser = build_parser()
    args = parser.parse_args(argv)

    load_dotenv(args.env_file)
    setup_logging(args.log_level or os.getenv("LOG_LEVEL", "INFO"))

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except RebalancerError as e:
        logging.getLogger(__name__).error(f"{type(e).__name__}: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
