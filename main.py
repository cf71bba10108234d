import argparse
import logging
import os
import subprocess
import sys
import time

from meeting import Meeting
from models import ValidationError
from utils import (
    StorageError, add_attendees_to_file, add_category, clear_attendees_file,
    format_cost, format_elapsed, list_attendees, list_categories, load_categories,
    load_config, load_roster, remove_attendees_from_file, remove_category, status_line
)

logger = logging.getLogger(__name__)

UI_SCRIPT = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'ui.py')


def positive_int(value):
    count = int(value)
    if count < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1 (got {value})")
    return count

def non_negative_float(value):
    number = float(value)
    if not number >= 0:
        raise argparse.ArgumentTypeError(f"must be zero or greater (got {value})")
    return number

def build_parser():
    parser = argparse.ArgumentParser(description='Track the running cost of a meeting')
    parser.add_argument('--config', default='config.yaml', help='YAML config file (default: config.yaml)')
    parser.add_argument('--categories', help='Salary category file (overrides config)')
    parser.add_argument('--attendees', help='Attendee list file (overrides config)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command')

    # ===== Category Management Commands =====
    parser_add_cat = subparsers.add_parser('add-category', help='Add or update a salary category')
    parser_add_cat.add_argument('name', type=str, help='Category name (e.g. Engineer)')
    parser_add_cat.add_argument('salary', type=float, help='Annual salary')
    subparsers.add_parser('list-categories', help='List all salary categories')
    parser_remove_cat = subparsers.add_parser('remove-category', help='Remove a salary category')
    parser_remove_cat.add_argument('name', type=str, help='Category name')

    # ===== Attendee Commands =====
    parser_add_att = subparsers.add_parser('add-attendee', help='Add attendees to the attendee list')
    parser_add_att.add_argument('category', type=str, help='Category name')
    parser_add_att.add_argument('count', type=positive_int, nargs='?', default=1, help='Number of attendees')
    parser_remove_att = subparsers.add_parser('remove-attendee', help='Remove attendees from the attendee list')
    parser_remove_att.add_argument('category', type=str, help='Category name')
    parser_remove_att.add_argument('count', type=positive_int, nargs='?', default=1, help='Number of attendees')
    subparsers.add_parser('list-attendees', help='List the attendee list')
    subparsers.add_parser('clear-attendees', help='Remove everyone from the attendee list')

    # ===== Cost Commands =====
    parser_cost = subparsers.add_parser('cost', help='Cost of the attendee list for a given duration')
    parser_cost.add_argument('--minutes', type=non_negative_float, required=True, help='Meeting length in minutes')
    parser_track = subparsers.add_parser('track', help='Track a meeting live in the terminal (Ctrl-C to stop)')
    parser_track.add_argument('--limit', type=non_negative_float, default=None,
                              help='Stop automatically after this many seconds')
    subparsers.add_parser('ui', help='Open the streamlit dashboard')
    return parser

def estimate_cost(categories, records, minutes):
    """Run a meeting over a synthetic clock covering exactly `minutes`."""
    ticks = iter([0.0, minutes * 60.0])
    meeting = Meeting.from_roster_records(categories, records, clock=lambda: next(ticks))
    meeting.start()
    meeting.stop()
    return meeting

def track(meeting, refresh_seconds, currency='$', limit=None, out=None):
    """Redraw the status line until Ctrl-C or until `limit` seconds have run."""
    out = out or sys.stdout
    meeting.start()
    logger.info("Tracking %d attendees", meeting.total_headcount())
    try:
        while True:
            out.write('\r' + status_line(meeting, currency))
            out.flush()
            if limit is not None and meeting.elapsed().total_seconds() >= limit:
                break
            time.sleep(refresh_seconds)
    except KeyboardInterrupt:
        pass
    finally:
        meeting.stop()
        out.write('\n')
    return meeting

def main(argv=None):
    """Main entry point for the meeting cost tracker CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except StorageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    level = logging.DEBUG if args.verbose else getattr(logging, str(config['log_level']).upper(), logging.WARNING)
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')

    categories_path = args.categories or config['categories_file']
    attendees_path = args.attendees or config['attendees_file']
    currency = config['currency']

    try:
        # ===== Category Management Commands =====
        if args.command == 'add-category':
            add_category(categories_path, args.name, args.salary, currency)
        elif args.command == 'list-categories':
            list_categories(categories_path, currency)
        elif args.command == 'remove-category':
            remove_category(categories_path, args.name)

        # ===== Attendee Commands =====
        elif args.command == 'add-attendee':
            add_attendees_to_file(categories_path, attendees_path, args.category, args.count)
        elif args.command == 'remove-attendee':
            remove_attendees_from_file(categories_path, attendees_path, args.category, args.count)
        elif args.command == 'list-attendees':
            list_attendees(categories_path, attendees_path, currency)
        elif args.command == 'clear-attendees':
            clear_attendees_file(attendees_path)

        # ===== Cost Commands =====
        elif args.command == 'cost':
            meeting = estimate_cost(load_categories(categories_path), load_roster(attendees_path), args.minutes)
            print(f"{meeting.total_headcount()} attendees for {format_elapsed(meeting.elapsed())}: "
                  f"{format_cost(meeting.total_cost(), currency)} "
                  f"({format_cost(meeting.combined_hourly_rate(), currency)}/hour)")
        elif args.command == 'track':
            meeting = Meeting.from_roster_records(load_categories(categories_path), load_roster(attendees_path))
            if not meeting.total_headcount():
                print('No attendees in the list; cost will stay at zero.')
            track(meeting, config['refresh_seconds'], currency, limit=args.limit)
            print(f"Meeting lasted {format_elapsed(meeting.elapsed())} and cost "
                  f"{format_cost(meeting.total_cost(), currency)}")
        elif args.command == 'ui':
            return subprocess.call([sys.executable, '-m', 'streamlit', 'run', UI_SCRIPT, '--',
                                    '--config', args.config,
                                    '--categories', categories_path,
                                    '--attendees', attendees_path])
        else:
            parser.print_help()
    except (ValidationError, StorageError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0

if __name__ == '__main__':
    sys.exit(main())
