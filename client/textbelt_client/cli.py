import argparse
import os
import sys

from .api_caller import TextbeltClient, CustomOTP
from .config import TextbeltConfig, with_key, with_url, with_timeout, default_config_dir
from .logging_config import setup_logging


def load_client(args: argparse.Namespace) -> TextbeltClient:
    """Build a client from the config file, the environment and command line overrides"""
    options = []
    if args.key:
        options.append(with_key(args.key))
    if args.url:
        options.append(with_url(args.url))
    if args.timeout is not None:
        options.append(with_timeout(args.timeout))
    return TextbeltClient(TextbeltConfig.load(args.config).apply(*options))


def cmd_quota(args: argparse.Namespace) -> int:
    """Print remaining quota"""
    try:
        client = load_client(args)
        print(client.quota())
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_send(args: argparse.Namespace) -> int:
    """Send an SMS message"""
    try:
        client = load_client(args)
        text_id = client.send(args.phone, args.message)
        if args.verbose:
            print(f"SMS sent successfully! Message ID: {text_id}")
        else:
            print(text_id)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_status(args: argparse.Namespace) -> int:
    """Print delivery status of a message"""
    try:
        client = load_client(args)
        status = client.status(args.text_id)
        # Unrecognized vendor states come back as plain strings
        print(getattr(status, "value", status))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_otp_generate(args: argparse.Namespace) -> int:
    """Generate and text a one-time password"""
    try:
        client = load_client(args)
        otp = CustomOTP(
            phone=args.phone,
            userid=args.userid,
            message=args.message or "",
            lifetime=args.lifetime,
            length=args.length,
        )
        print(client.generate_custom_otp(otp))
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_otp_verify(args: argparse.Namespace) -> int:
    """Verify a one-time password, exit status 2 when it is not valid"""
    try:
        client = load_client(args)
        if client.verify_otp(args.otp, args.userid):
            print("valid")
            return 0
        print("invalid")
        return 2
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize Textbelt client - creates config directory and config file"""
    config_dir = args.config_dir or default_config_dir()
    config_path = os.path.join(config_dir, "config.json")

    print(f"Initializing Textbelt client in: {config_dir}")

    if os.path.exists(config_path) and not args.force:
        print(f"Config file already exists: {config_path}")
        print("Use --force to overwrite existing files")
        return 1

    try:
        values = {}
        if args.key:
            values["key"] = args.key
        if args.url:
            values["url"] = args.url
        if args.timeout is not None:
            values["timeout"] = args.timeout
        TextbeltConfig(**values).save(config_path)
    except Exception as e:
        print(f"Failed to create config file: {e}", file=sys.stderr)
        return 1

    print(f"Created config file: {config_path}")
    return 0


def add_connection_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", default=None, help="Config file path (default: TEXTBELT_CONFIG or XDG config directory)")
    p.add_argument("--key", default=None, help="Textbelt API key (overrides config)")
    p.add_argument("--url", default=None, help="Textbelt API URL (overrides config)")
    p.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds (overrides config)")
    p.add_argument("--verbose", "-v", action="store_true", help="Verbose output (default: False)")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="textbelt-cli", description="Textbelt SMS and OTP client utilities")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="Create a config file", description="Create the configuration directory and a config.json holding the API key, URL and timeout.")
    p_init.add_argument("--config-dir", help="Config directory (default: XDG_CONFIG_HOME/textbelt or ~/.config/textbelt)")
    p_init.add_argument("--key", help="Textbelt API key (default: free 'textbelt' key)")
    p_init.add_argument("--url", help="Textbelt API URL (default: https://textbelt.com)")
    p_init.add_argument("--timeout", type=float, help="Request timeout in seconds (default: 5)")
    p_init.add_argument("--force", action="store_true", help="Overwrite existing files")
    p_init.set_defaults(func=cmd_init)

    p_quota = sub.add_parser("quota", help="Show remaining message quota")
    add_connection_args(p_quota)
    p_quota.set_defaults(func=cmd_quota)

    p_send = sub.add_parser("send", help="Send an SMS message", description="Send an SMS message and print the Textbelt message ID.")
    p_send.add_argument("phone", help="Recipient phone number")
    p_send.add_argument("message", help="Message to send")
    add_connection_args(p_send)
    p_send.set_defaults(func=cmd_send)

    p_status = sub.add_parser("status", help="Show delivery status of a message")
    p_status.add_argument("text_id", help="Message ID returned by send")
    add_connection_args(p_status)
    p_status.set_defaults(func=cmd_status)

    p_gen = sub.add_parser("otp-generate", help="Generate and send a one-time password", description="Text a one-time password to a phone number and print the generated code.")
    p_gen.add_argument("phone", help="Recipient phone number")
    p_gen.add_argument("userid", help="Identifier the OTP is bound to")
    p_gen.add_argument("--message", default=None, help="Custom message, $OTP is replaced by the code")
    p_gen.add_argument("--lifetime", type=int, default=0, help="Seconds the code stays valid (default: vendor default)")
    p_gen.add_argument("--length", type=int, default=0, help="Number of digits (default: vendor default)")
    add_connection_args(p_gen)
    p_gen.set_defaults(func=cmd_otp_generate)

    p_verify = sub.add_parser("otp-verify", help="Verify a one-time password")
    p_verify.add_argument("otp", help="Code entered by the user")
    p_verify.add_argument("userid", help="Identifier the OTP was generated for")
    add_connection_args(p_verify)
    p_verify.set_defaults(func=cmd_otp_verify)

    return p


def main(argv=None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "verbose", False):
        setup_logging(log_level="DEBUG")
    else:
        setup_logging(log_level=os.environ.get("LOG_LEVEL", "WARNING"))
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
