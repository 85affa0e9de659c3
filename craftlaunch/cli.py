"""Command line entry point."""

import asyncio
import logging
import sys
from argparse import ArgumentParser
from pathlib import Path
from typing import List, Optional

from .auth import OfflineAuthenticator
from .config import load_config
from .core import GameLauncher, InstallationSession
from .errors import LauncherError
from .utils import setup_logging
from .versions import RuntimeContext, Source

logger = logging.getLogger(__name__)


def register_arguments() -> ArgumentParser:
    parser = ArgumentParser(prog="craftlaunch", description="Install and launch a Minecraft version.")
    parser.add_argument("version", help="Version id to install, for example 1.20.1.")
    parser.add_argument("--dir", type=Path, default=Path(".minecraft"), help="Install root.")
    parser.add_argument("--source", choices=[s.value for s in Source], default=Source.MOJANG.value)
    parser.add_argument("--config", type=Path, default=None, help="Path of config.json.")
    parser.add_argument("--player", help="Profile name to play with.")
    parser.add_argument("--username", help="Authserver login.")
    parser.add_argument("--password", help="Authserver password.")
    parser.add_argument("--offline", action="store_true", help="Skip authentication.")
    parser.add_argument("--demo", action="store_true", help="Launch as a demo user.")
    parser.add_argument("--output", type=Path, default=None, help="Where to write the launch script.")
    parser.add_argument("--run", action="store_true", help="Start the game after writing the script.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


async def run(ns) -> int:
    config = load_config(ns.config)
    context = RuntimeContext.current(is_demo_user=ns.demo)
    player = ns.player or ns.username

    async with InstallationSession(ns.dir, ns.version, Source.from_name(ns.source), config, context) as session:
        await session.install()
        if ns.offline:
            auth = await OfflineAuthenticator.authenticate(player)
        else:
            auth = await session.authenticate(ns.username, ns.password, player)
        script = session.launch_script(auth)

    if script is None:
        print("Has not java version needs.")
        return 1

    output = ns.output or session.mc_dir / ("launch.bat" if context.is_windows else "launch.sh")
    script.write(output)
    print(f"Launch script written to {output}")
    if ns.run:
        GameLauncher(session.mc_dir, config).launch_game(output)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = register_arguments()
    ns = parser.parse_args(argv)
    if not ns.offline and not (ns.username and ns.password):
        parser.error("--username and --password are required unless --offline is given")
    if ns.offline and not (ns.player or ns.username):
        parser.error("--player is required with --offline")

    setup_logging(level=logging.DEBUG if ns.verbose else logging.INFO)
    try:
        return asyncio.run(run(ns))
    except LauncherError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
