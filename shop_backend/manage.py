"""
PATH: manage.py

Django management entrypoint.

Key safeguard:
- If DJANGO_SETTINGS_MODULE is unset OR incorrectly set to the settings *package*
  ("backend.settings"), we force it to a concrete module:
  - "backend.settings.test" for `manage.py test`
  - "backend.settings.dev" otherwise

Production:
- Production must set DJANGO_SETTINGS_MODULE=backend.settings.prod explicitly.
  We respect that.

Bootstrap hook:
- If RUN_CREATE_SUPERUSER=True is set in environment variables,
  an admin user is created (if not existing) before the command runs.
"""

from __future__ import annotations

import os
import sys


def _ensure_settings_module() -> None:
    current = (os.environ.get("DJANGO_SETTINGS_MODULE") or "").strip()

    # If CI (or anyone) points to the package, Django won't load INSTALLED_APPS.
    if not current or current == "backend.settings":
        if len(sys.argv) > 1 and sys.argv[1] == "test":
            os.environ["DJANGO_SETTINGS_MODULE"] = "backend.settings.test"
        else:
            os.environ["DJANGO_SETTINGS_MODULE"] = "backend.settings.dev"


def _create_superuser_if_requested() -> None:
    """
    Creates the shop admin when RUN_CREATE_SUPERUSER=True.
    Safe to run multiple times (idempotent).
    """

    if os.environ.get("RUN_CREATE_SUPERUSER") != "True":
        return

    import django

    django.setup()

    from django.contrib.auth import get_user_model

    User = get_user_model()

    email = os.environ.get("AUTO_ADMIN_EMAIL", "admin@layered.pl")
    password = os.environ.get("AUTO_ADMIN_PASSWORD")
    if not password:
        print("RUN_CREATE_SUPERUSER set but AUTO_ADMIN_PASSWORD is empty; skipping.")
        return

    if not User.objects.filter(email=email).exists():
        User.objects.create_superuser(email=email, password=password)
        print("Admin user created.")
    else:
        print("Admin user already exists.")


def main() -> None:
    _ensure_settings_module()

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    _create_superuser_if_requested()

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
