"""CLI entrypoint for secretserver-toolkit."""
import sys
import argparse
import logging
from pathlib import Path

from .validators import parse_secret_ref, validate_secret_name

VERSION = "0.1.0"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _client():
    from secretserver_toolkit.secrets.domains.server_client import SecretServerClient

    return SecretServerClient.from_config()


def _report_ambiguous(error):
    print(f"Error: {error}", file=sys.stderr)
    print("Matching secret IDs:", file=sys.stderr)
    for secret_id in error.ids:
        print(f"  {secret_id}", file=sys.stderr)
    print("\nRetry with one of the IDs above.", file=sys.stderr)
    sys.exit(1)


def cmd_version(args):
    """Show version information."""
    print(f"secretserver-toolkit {VERSION}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from secretserver_toolkit.secrets.domains.preferences import CONFIG_PATH_KEY, set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference(CONFIG_PATH_KEY, str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show current config file path."""
    from secretserver_toolkit.secrets.domains.preferences import (
        CONFIG_PATH_KEY, default_config_path, get_preference,
    )

    config_path_pref = get_preference(CONFIG_PATH_KEY)

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        if default_config.exists():
            print("Source: default")
        else:
            print("Source: default (file not found)")


def cmd_config_clear(args):
    """Clear config path preference."""
    from secretserver_toolkit.secrets.domains.preferences import (
        CONFIG_PATH_KEY, clear_preference, default_config_path,
    )

    clear_preference(CONFIG_PATH_KEY)
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def cmd_secrets_get(args):
    """Get a secret (or one of its fields) from Secret Server."""
    from secretserver_toolkit.secrets.domains.errors import MultipleSecretsFoundError
    from secretserver_toolkit.secrets.workflows.secret_operations import (
        fetch_secret, fetch_secret_by_name,
    )

    ref = parse_secret_ref(args.secret)
    client = _client()

    try:
        if isinstance(ref, int):
            secret = fetch_secret(client, ref)
        else:
            secret = fetch_secret_by_name(client, ref)
    except MultipleSecretsFoundError as e:
        _report_ambiguous(e)

    if args.field:
        value, found = secret.field(args.field)
        if not found:
            print(f"Error: Secret {secret.id} has no field '{args.field}'", file=sys.stderr)
            sys.exit(1)
        if args.quiet:
            print(value)
        else:
            print(f"Secret {secret.id} '{secret.name}' field '{args.field}': {value}")
        sys.exit(0)

    if not args.quiet:
        print(f"Secret {secret.id} '{secret.name}' (template {secret.secret_template_id}, folder {secret.folder_id})")
    for item in secret.fields:
        key = item.slug or item.field_name
        if args.quiet:
            print(f"{key}={item.item_value}")
        else:
            marker = " [file]" if item.is_file else ""
            print(f"  {key}{marker}: {item.item_value}")
    sys.exit(0)


def cmd_secrets_lookup(args):
    """Resolve a secret name to its ID."""
    from secretserver_toolkit.secrets.domains.errors import MultipleSecretsFoundError
    from secretserver_toolkit.secrets.workflows.secret_operations import resolve_secret_id

    validate_secret_name(args.name)
    client = _client()

    try:
        secret_id = resolve_secret_id(client, args.name)
    except MultipleSecretsFoundError as e:
        _report_ambiguous(e)

    if args.quiet:
        print(secret_id)
    else:
        print(f"Secret '{args.name}': {secret_id}")
    sys.exit(0)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="tss",
        description="secretserver-toolkit CLI - read secrets from Thycotic/Delinea Secret Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (authentication, network, secret not found, ambiguous name, etc.)
  2 - Usage error (invalid arguments)

Environment variables:
  TSS_SERVER_URL - Secret Server base URL (overrides config file)
  TSS_TOKEN      - Access token (overrides config file)

Configuration:
  Default location: ~/.config/secretserver-toolkit/config.yml
  Custom path: Set with 'tss config set-path <path>'
  View current: Run 'tss config show'
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging on stderr (secret values are never logged)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of secretserver-toolkit"
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage secretserver-toolkit configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="Store the absolute path to your config file in ~/.config/secretserver-toolkit/preferences.json"
    )
    config_set_path_parser.add_argument("path", help="Path to config file")

    config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="Display the current configuration file path and its source (preference or default)"
    )
    config_subparsers.add_parser(
        "clear",
        help="Clear config path preference",
        description="Remove the config path preference and fall back to the default location"
    )

    # secrets command
    secrets_parser = subparsers.add_parser(
        "secrets",
        help="Secret operations",
        description="Read secrets from Secret Server"
    )
    secrets_subparsers = secrets_parser.add_subparsers(dest="secrets_command")

    get_parser = secrets_subparsers.add_parser(
        "get",
        help="Get a secret or one of its fields",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Fetch a secret by numeric ID or by name. File attachments are downloaded
and shown in place of their field values.

A name that matches several secrets is an error; the matching IDs are
listed so you can retry with one of them.
        """
    )
    get_parser.add_argument("secret", help="Secret ID (digits only) or secret name")
    get_parser.add_argument(
        "-f", "--field",
        help="Print only this field (matched by field name or slug)"
    )
    get_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Output only values, without formatting (useful for scripts)"
    )

    lookup_parser = secrets_subparsers.add_parser(
        "lookup",
        help="Resolve a secret name to its ID",
        description="Search for a secret by exact name and print its ID"
    )
    lookup_parser.add_argument("name", help="Secret name")
    lookup_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Output only the ID"
    )

    return parser, config_parser, secrets_parser


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (authentication, network, secret not found, etc.)
        2 - Usage errors (invalid arguments)
    """
    parser, config_parser, secrets_parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    commands = {
        ("version", None): cmd_version,
        ("config", "set-path"): cmd_config_set_path,
        ("config", "show"): cmd_config_show,
        ("config", "clear"): cmd_config_clear,
        ("secrets", "get"): cmd_secrets_get,
        ("secrets", "lookup"): cmd_secrets_lookup,
    }
    subcommand = getattr(args, f"{args.command}_command", None)
    handler = commands.get((args.command, subcommand))

    if handler is None:
        {"config": config_parser, "secrets": secrets_parser}.get(args.command, parser).print_help()
        sys.exit(2)

    try:
        handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
