#!/usr/bin/env python3
"""Entry point for the YS Story pygame presentation."""

from __future__ import annotations

import argparse
import logging

import pygame

from game import DEFAULT_SHARE_URL, Game


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="YS Story")
    parser.add_argument(
        "--smoke",
        action="store_true",
        help="Run for a small number of frames and exit (test mode).",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=90,
        help="Frame budget for --smoke mode.",
    )
    parser.add_argument(
        "--autoplay",
        action="store_true",
        help="Automatically unlock and walk through every screen (useful for smoke tests).",
    )
    parser.add_argument("--content", default="content.json", help="Path to the content JSON.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reveal and particle randomness.")
    parser.add_argument("--share-url", default=DEFAULT_SHARE_URL, help="Address offered by the share action.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    pygame.init()
    pygame.display.set_caption("YS Story")

    game = Game(
        smoke=args.smoke,
        max_frames=max(1, args.frames),
        autoplay=args.autoplay,
        content_path=args.content,
        seed=args.seed,
        share_url=args.share_url,
    )
    game.run()

    pygame.quit()


if __name__ == "__main__":
    main()
