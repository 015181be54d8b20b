"""
Command-line entry point for motion-server.

Parses the command line, builds the immutable ServerConfig (YAML file plus
flag overrides), then starts the Flask server and optionally opens the client
in a browser.
"""

import sys
import logging
import argparse
import threading
import webbrowser
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import SERVER_SIGNATURE
from .config.parser import ConfigParser, ConfigurationError, create_config_template
from .models.config import ServerConfig
from .server.app import create_app


logger = logging.getLogger(__name__)

BROWSER_DELAY_SECONDS = 1.0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='motion-server',
        description=SERVER_SIGNATURE,
        epilog='Example: motion-server -m ~/Music'
    )
    parser.add_argument('-m', '--music', dest='music_path', metavar='PATH',
                        help='path to music folder, served under /music')
    parser.add_argument('-b', '--backgrounds', dest='backgrounds_path', metavar='PATH',
                        help='path to folder with background images and videos')
    parser.add_argument('-p', '--port', type=int, metavar='PORT',
                        help='listening port (default: 8000)')
    parser.add_argument('-s', '--server-only', action='store_true',
                        help='start server only (do not launch client)')
    parser.add_argument('-e', '--external', action='store_true',
                        help='allow external connections (by default, only localhost)')
    parser.add_argument('-c', '--config', metavar='FILE',
                        help='YAML configuration file')
    parser.add_argument('--public', dest='public_path', metavar='PATH',
                        help='folder holding the web client bundle')
    parser.add_argument('--show-hidden', action='store_true',
                        help='include dotfiles in directory listings')
    parser.add_argument('--strict', action='store_true',
                        help='treat configuration warnings as errors')
    parser.add_argument('--init-config', metavar='FILE',
                        help='write a configuration template and exit')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='logging verbosity (default: INFO)')
    return parser


def setup_logging(level: str = 'INFO') -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate parsed flags into configuration overrides.

    Flags that were not given map to None so the file value is kept.
    """
    overrides: Dict[str, Any] = {
        'music_path': args.music_path,
        'backgrounds_path': args.backgrounds_path,
        'public_path': args.public_path,
        'port': args.port,
        'allow_external': True if args.external else None,
        'launch_client': False if args.server_only else None,
    }
    if args.show_hidden:
        overrides['media'] = {'show_hidden': True}
    return overrides


def prompt_music_path() -> Optional[str]:
    """Ask for the music folder on an interactive terminal; Enter picks the home directory."""
    if not sys.stdin.isatty():
        return None
    answer = input(
        '\nMusic folder not defined. Please enter full path to music folder\n'
        'or just press Enter to use your home directory:\n> '
    ).strip()
    return answer or str(Path.home())


def launch_client(config: ServerConfig) -> None:
    """Open the client in the default browser once the server is up."""
    logger.info("Launching client in browser...")
    timer = threading.Timer(BROWSER_DELAY_SECONDS, webbrowser.open, args=[config.client_url])
    timer.daemon = True
    timer.start()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.init_config:
        try:
            create_config_template(args.init_config)
        except ConfigurationError as e:
            logger.error(str(e))
            return 1
        logger.info(f"Configuration template written to {args.init_config}")
        return 0

    parser = ConfigParser(strict_mode=args.strict)
    overrides = overrides_from_args(args)

    try:
        result = parser.load_config(args.config, overrides, check_strict=False)
        if result.config.music_path is None and args.music_path is None:
            music_path = prompt_music_path()
            if music_path:
                overrides['music_path'] = music_path
                result = parser.load_config(args.config, overrides, check_strict=False)
        parser.enforce_strict(result.warnings)
    except ConfigurationError as e:
        logger.error(f"ERROR: {e}")
        return 1

    for warning in result.warnings:
        logger.warning(warning)

    config = result.config
    logger.info(SERVER_SIGNATURE)
    if config.music_path:
        logger.info(f"/music folder mounted on {config.music_path}")
    if config.backgrounds_path:
        logger.info(f"/backgrounds folder mounted on {config.backgrounds_path}")
    logger.info(
        f"Listening on port {config.port} "
        f"{'accepting external connections!' if config.allow_external else 'for localhost connections only'}"
    )

    app = create_app(config)

    if config.launch_client:
        if config.public_path:
            launch_client(config)
        else:
            logger.warning("No client bundle folder configured - not opening a browser")

    app.run(host=config.bind_host, port=config.port, debug=False, threaded=True)
    return 0
