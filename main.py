"""Rocco — launcher. Loads .env, configures logging and runs the Discord bot."""

import argparse
import logging
import sys
from pathlib import Path

from rocco.bot import RoccoBot
from rocco.config import get_config
from rocco.llm import EchoLLM, HttpLLM

ROOT = Path(__file__).parent


def main():
    parser = argparse.ArgumentParser(description="Rocco Discord bot")
    parser.add_argument("--env-file", type=Path, default=ROOT / ".env",
                        help="dotenv file to load (default: ./.env)")
    parser.add_argument("--echo", action="store_true",
                        help="Reply with the last message instead of calling the model")
    parser.add_argument("--log-level", default=None,
                        help="Override LOG_LEVEL (DEBUG, INFO, ...)")
    args = parser.parse_args()

    config = get_config(args.env_file)
    logging.basicConfig(
        level=(args.log_level or config.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not config.discord_token:
        print("DISCORD_TOKEN is not set", file=sys.stderr)
        sys.exit(1)

    if args.echo:
        llm = EchoLLM()
    else:
        llm = HttpLLM(
            base_url=config.llm_base_url,
            api_key=config.llm_api_key,
            model=config.llm_model,
            timeout=config.llm_timeout,
        )

    bot = RoccoBot(config, llm)
    # logging is configured above; keep discord.py from adding its own handler
    bot.run(config.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
