"""Input validation for CLI arguments."""
import sys
from typing import Union


def parse_secret_ref(ref: str) -> Union[int, str]:
    """
    Interpret a secret argument as an ID or a name.

    All-digit arguments are secret IDs; anything else is a secret name
    to be resolved with a search.

    Args:
        ref: Secret ID or name from the command line

    Returns:
        int ID, or the name unchanged

    Raises:
        SystemExit with code 2 if the argument is empty
    """
    if not ref or not ref.strip():
        print("Error: Secret ID or name cannot be empty", file=sys.stderr)
        print("\nPass a numeric secret ID (e.g. 42) or a secret name.", file=sys.stderr)
        sys.exit(2)

    # isdigit() alone accepts superscripts like "²", which int() rejects
    if ref.isascii() and ref.isdigit():
        return int(ref)
    return ref


def validate_secret_name(name: str) -> None:
    """
    Validate a secret name for a name search.

    Args:
        name: Secret name to validate

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name or not name.strip():
        print("Error: Secret name cannot be empty", file=sys.stderr)
        sys.exit(2)
