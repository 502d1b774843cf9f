#!/usr/bin/env python3
"""
signhub Application

Digital signage display engine.
Rotates through the active screens, refreshing the dataset from the data service.
"""

import argparse
import signal
import sys
from datetime import datetime

from signhub.config import get_config
from signhub.schedulers import get_scheduler


# Global scheduler instance for signal handler
scheduler = None


def signal_handler(signum, frame):
    """Handle shutdown signals - exit immediately."""
    global scheduler

    print()
    print("=" * 70)
    print(f"[{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}] Shutdown requested with signum {signum}...")
    print("=" * 70)

    # Blank the display on shutdown
    if scheduler and scheduler.renderer and not scheduler.debug:
        print(f"[{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}] Attempting to clear display...")
        scheduler.renderer.clear()

    # Exit immediately - don't wait for graceful shutdown
    sys.exit(0)


def main():
    """Main entry point."""
    global scheduler

    # Parse command line arguments
    parser = argparse.ArgumentParser(
        description="signhub - Digital Signage Display Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python app.py                      Run in normal mode (write frames to output/)
  python app.py --debug              Run in debug mode (print screens to console)
  python app.py --config site.json   Use a different config file
        """
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Debug mode: print screens to console instead of writing frames"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Quiet mode: only log errors and banners"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config file (default: config.json)"
    )
    args = parser.parse_args()

    # Register signal handlers for graceful shutdown
    signal.signal(signal.SIGINT, signal_handler)   # Ctrl+C
    signal.signal(signal.SIGTERM, signal_handler)  # Docker stop

    try:
        # Get config and create appropriate scheduler based on mode
        config = get_config(args.config)
        scheduler = get_scheduler(config, debug=args.debug, quiet=args.quiet)
        scheduler.run()

    except Exception as e:
        print(f"\n[ERROR] Fatal error: {e}", file=sys.stderr)
        sys.exit(1)

    finally:
        print()
        print("=" * 70)
        print("signhub stopped")
        print("=" * 70)


if __name__ == "__main__":
    main()
