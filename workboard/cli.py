#!/usr/bin/env python3
"""Workboard CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from workboard.lib.api import WorkboardAPI
from workboard.lib.config import ClientConfig, load_config, resolve_config_path
from workboard.lib.snapshot import Snapshot
from workboard.schedule.aggregator import AVAILABILITY_STATUSES, ALL_STATUSES
from workboard.schedule.duration import HOURS_OPTIONS, MINUTES_OPTIONS
from workboard.workflow.fsm import STATES, TRIGGERS
from workboard.commands import move as cmd_move_module
from workboard.commands import schedule as cmd_schedule_module
from workboard.commands import session as cmd_session_module
from workboard.commands import tasks as cmd_tasks_module

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_config(args) -> ClientConfig:
    """Load config from --config, $WORKBOARD_CONFIG or ./workboard.env."""
    try:
        return load_config(resolve_config_path(args.config))
    except ValueError as e:
        print(f"ERROR: Invalid config: {e}")
        sys.exit(2)


def configure_logging(args, config: ClientConfig) -> None:
    level = logging.DEBUG if args.verbose else getattr(logging, config.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def get_source(args, config: ClientConfig):
    """Ticket source: an offline snapshot when --snapshot is given, else the REST API."""
    if args.snapshot:
        return Snapshot(Path(args.snapshot))
    return WorkboardAPI.from_config(config)


def _setup(args):
    config = get_config(args)
    configure_logging(args, config)
    return config, get_source(args, config)


def cmd_schedule(args):
    config, source = _setup(args)
    return cmd_schedule_module.cmd_schedule(args, config, source)


def cmd_tasks(args):
    config, source = _setup(args)
    return cmd_tasks_module.cmd_tasks(args, config, source)


def cmd_start(args):
    config, source = _setup(args)
    return cmd_session_module.cmd_start(args, config, source)


def cmd_pause(args):
    config, source = _setup(args)
    return cmd_session_module.cmd_pause(args, config, source)


def cmd_estimate(args):
    config, source = _setup(args)
    return cmd_session_module.cmd_estimate(args, config, source)


def cmd_move(args):
    config, source = _setup(args)
    return cmd_move_module.cmd_move(args, config, source)


def cmd_watch(args):
    # Textual is only imported for the TUI
    from workboard.commands import watch as cmd_watch_module
    config, source = _setup(args)
    return cmd_watch_module.cmd_watch(args, config, source)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='wb',
        description='Team availability board and ticket sessions',
    )
    parser.add_argument('--config', '-c', help='Path to workboard.env')
    parser.add_argument('--snapshot', '-s', help='Read tickets from a YAML/JSON snapshot instead of the API')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    # wb schedule
    p_schedule = subparsers.add_parser('schedule', help='Print the availability board')
    p_schedule.add_argument('--status', default=ALL_STATUSES,
                            choices=[ALL_STATUSES] + AVAILABILITY_STATUSES,
                            help='Only show jobs in this status')
    p_schedule.add_argument('--json', action='store_true', help='Output as JSON')
    p_schedule.set_defaults(func=cmd_schedule)

    # wb tasks
    p_tasks = subparsers.add_parser('tasks', help="Show a member's queue and live countdown")
    p_tasks.add_argument('member', help='Team member name')
    p_tasks.set_defaults(func=cmd_tasks)

    # wb start
    p_start = subparsers.add_parser('start', help='Start or resume work on a ticket')
    p_start.add_argument('ticket', help='Ticket id or job id')
    p_start.add_argument('--member', '-m', help='Who is starting it (defaults to first assignee)')
    p_start.set_defaults(func=cmd_start)

    # wb pause
    p_pause = subparsers.add_parser('pause', help='Pause a running ticket')
    p_pause.add_argument('ticket', help='Ticket id or job id')
    p_pause.set_defaults(func=cmd_pause)

    # wb estimate
    p_estimate = subparsers.add_parser('estimate', help='Show or set (once) the estimate on a ticket')
    p_estimate.add_argument('ticket', help='Ticket id or job id')
    p_estimate.add_argument('hours', nargs='?', type=int, choices=HOURS_OPTIONS)
    p_estimate.add_argument('minutes', nargs='?', choices=MINUTES_OPTIONS)
    p_estimate.add_argument('--user', '-u', help='Your name (required to set)')
    p_estimate.add_argument('--email', '-e', help='Your email')
    p_estimate.set_defaults(func=cmd_estimate)

    # wb move
    p_move = subparsers.add_parser('move', help='Move a ticket through its workflow')
    p_move.add_argument('ticket', help='Ticket id or job id')
    p_move.add_argument('trigger', metavar='target', choices=TRIGGERS + STATES,
                        help='Workflow trigger, or the status to move to')
    p_move.set_defaults(func=cmd_move)

    # wb watch
    p_watch = subparsers.add_parser('watch', help='Live availability board (TUI)')
    p_watch.add_argument('--member', '-m', help='Member whose active job drives the countdown')
    p_watch.set_defaults(func=cmd_watch)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
