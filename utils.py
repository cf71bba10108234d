import logging
import os

import yaml

from models import AttendeeRoster, SalaryCategory, ValidationError

logger = logging.getLogger(__name__)

# Constants
CONFIG_PATH = 'config.yaml'
DEFAULT_CONFIG = {
    'categories_file': 'categories.yaml',
    'attendees_file': 'attendees.yaml',
    'refresh_seconds': 1.0,
    'currency': '$',
    'log_level': 'WARNING',
}


class StorageError(Exception):
    """Raised when a config, category or attendee file can't be read or written."""


# ===== File I/O Utilities =====

def load_yaml(path):
    """Load a YAML mapping from a file. Missing or empty files give an empty dict."""
    if not os.path.exists(path):
        return {}
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise StorageError(f"Could not read {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise StorageError(f"{path} must contain a mapping at the top level")
    return data

def save_yaml(path, data):
    """Save a mapping to a YAML file, overwriting it."""
    directory = os.path.dirname(path)
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w') as f:
            yaml.safe_dump(data, f, sort_keys=False)
    except (OSError, yaml.YAMLError) as e:
        raise StorageError(f"Could not write {path}: {e}") from e

def load_records(path, key):
    """Return the list stored under `key`, or an empty list if it is absent."""
    records = load_yaml(path).get(key)
    if records is None:
        return []
    if not isinstance(records, list):
        raise StorageError(f"{path}: '{key}' must be a list")
    return records

# ===== Configuration =====

def load_config(path=CONFIG_PATH):
    """Load config.yaml merged over the defaults."""
    config = dict(DEFAULT_CONFIG)
    config.update(load_yaml(path))
    try:
        config['refresh_seconds'] = float(config['refresh_seconds'])
    except (TypeError, ValueError) as e:
        raise StorageError(f"refresh_seconds must be a number in {path}") from e
    if config['refresh_seconds'] <= 0:
        raise StorageError(f"refresh_seconds must be positive in {path}")
    return config

# ===== Salary Categories =====

def load_categories(path):
    """Load salary categories. A missing file gives an empty list."""
    records = load_records(path, 'categories')
    categories = []
    for i, record in enumerate(records):
        if not isinstance(record, dict) or 'name' not in record or 'annual_salary' not in record:
            raise StorageError(f"{path}: category #{i + 1} needs 'name' and 'annual_salary'")
        try:
            categories.append(SalaryCategory.create(record['name'], record['annual_salary']))
        except ValidationError as e:
            raise StorageError(f"{path}: category #{i + 1}: {e}") from e
    logger.info("Loaded %d categories from %s", len(categories), path)
    return categories

def save_categories(path, categories):
    """Save salary categories, replacing the file contents."""
    save_yaml(path, {'categories': [c.to_dict() for c in categories]})
    logger.info("Saved %d categories to %s", len(categories), path)

def find_category(categories, name):
    """Return the category with the given name, or None."""
    name = name.strip()
    for c in categories:
        if c.name == name:
            return c
    return None

def add_category(path, name, annual_salary, currency='$'):
    """Add a category, replacing the salary of an existing one with the same name."""
    category = SalaryCategory.create(name, annual_salary)
    categories = load_categories(path)
    replaced = False
    for i, c in enumerate(categories):
        if c.name == category.name:
            categories[i] = category
            replaced = True
    if not replaced:
        categories.append(category)
    save_categories(path, categories)
    verb = 'Updated' if replaced else 'Added'
    print(f"{verb} category: {category.name} ({format_cost(category.annual_salary, currency)}/year)")
    return category

def remove_category(path, name):
    """Remove a category by name. Returns True if something was removed."""
    categories = load_categories(path)
    remaining = [c for c in categories if c.name != name.strip()]
    if len(remaining) == len(categories):
        print(f"No category named: {name}")
        return False
    save_categories(path, remaining)
    print(f"Removed category: {name}")
    return True

def list_categories(path, currency='$'):
    """Print all salary categories."""
    categories = load_categories(path)
    if not categories:
        print('No categories found.')
    for c in categories:
        print(f"{c.name}: {format_cost(c.annual_salary, currency)}/year "
              f"({format_cost(c.hourly_rate(), currency)}/hour)")

# ===== Attendee Lists =====

def load_roster(path):
    """Load attendee records ({category, count}). A missing file gives an empty list."""
    records = load_records(path, 'attendees')
    result = []
    for i, record in enumerate(records):
        if not isinstance(record, dict) or 'category' not in record or 'count' not in record:
            raise StorageError(f"{path}: attendee entry #{i + 1} needs 'category' and 'count'")
        count = record['count']
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise StorageError(f"{path}: attendee entry #{i + 1} has invalid count {count!r}")
        result.append({'category': str(record['category']).strip(), 'count': count})
    logger.info("Loaded %d attendee entries from %s", len(result), path)
    return result

def save_roster(path, roster):
    """Save a roster (or a meeting's roster) as attendee records."""
    if not isinstance(roster, AttendeeRoster):
        roster = roster.roster
    records = roster.to_records()
    save_yaml(path, {'attendees': records})
    logger.info("Saved %d attendee entries to %s", len(records), path)

def add_attendees_to_file(categories_path, attendees_path, name, count):
    """Add attendees of a known category to a saved attendee list."""
    categories = load_categories(categories_path)
    category = find_category(categories, name)
    if category is None:
        raise StorageError(f"Unknown category: {name}")
    roster = AttendeeRoster.from_records(categories, load_roster(attendees_path))
    roster.add_attendees(category, count)
    save_roster(attendees_path, roster)
    print(f"Added {count} x {category.name} (now {roster.count_for(category.name)})")

def remove_attendees_from_file(categories_path, attendees_path, name, count):
    """Remove attendees from a saved attendee list. Unknown names are ignored."""
    roster = AttendeeRoster.from_records(load_categories(categories_path), load_roster(attendees_path))
    roster.remove_attendees(name.strip(), count)
    save_roster(attendees_path, roster)
    remaining = roster.count_for(name.strip()) or 0
    print(f"Removed up to {count} x {name.strip()} (now {remaining})")

def clear_attendees_file(attendees_path):
    """Empty a saved attendee list."""
    save_yaml(attendees_path, {'attendees': []})
    print('Cleared attendee list.')

def list_attendees(categories_path, attendees_path, currency='$'):
    """Print a saved attendee list with per-category hourly cost."""
    roster = AttendeeRoster.from_records(load_categories(categories_path), load_roster(attendees_path))
    if not len(roster):
        print('No attendees found.')
        return
    for entry in roster:
        print(f"{entry.category.name} x {entry.count} ({format_cost(entry.hourly_rate, currency)}/hour)")
    print(f"Total: {roster.total_headcount()} attendees, "
          f"{format_cost(roster.combined_hourly_rate(), currency)}/hour")

# ===== Display Formatting =====

def format_elapsed(elapsed):
    """Format a timedelta as HH:MM:SS (hours may exceed 24)."""
    total = int(elapsed.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

def format_cost(amount, currency='$'):
    """Format a money amount, e.g. $1,234.56."""
    return f"{currency}{amount:,.2f}"

def status_line(meeting, currency='$'):
    """One-line meeting status for the terminal display."""
    label = meeting.state.name.capitalize()
    headcount = meeting.total_headcount()
    noun = 'attendee' if headcount == 1 else 'attendees'
    return (f"[{label}] {format_elapsed(meeting.elapsed())}  "
            f"{format_cost(meeting.total_cost(), currency)}  ({headcount} {noun})")
