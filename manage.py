#!/usr/bin/env python
"""Command-line entry point for the Arogya Saathi access backend.

Typical use::

    python manage.py migrate
    python manage.py seed_demo
    python manage.py runserver
"""
import os
import sys


def main() -> None:
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'arogya.settings')
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Django is not importable; install the project with "
            "`pip install -e .[test]` inside an active virtual environment."
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
