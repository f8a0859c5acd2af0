"""
CommandKit example bot

Usage:
    python bot.py

Environment Variables:
    BOT_TOKEN - Discord bot token (required)
    LOG_LEVEL - Logging level (default: INFO)
    LOG_FILE_PATH - Rotating log file (default: console only)
    COMMANDKIT_COMMANDS_PATH - Folder of command files
    COMMANDKIT_EVENTS_PATH - Folder of event folders
    COMMANDKIT_VALIDATIONS_PATH - Folder of validation files
    COMMANDKIT_DEV_GUILD_IDS - Comma separated developer guild IDs
    COMMANDKIT_DEV_USER_IDS - Comma separated developer user IDs
    COMMANDKIT_DEV_ROLE_IDS - Comma separated developer role IDs
"""

import logging
import sys

import discord
from discord.ext import commands

from commandkit import CommandKit, CommandKitTree, ConfigurationError, ConfigurationManager, setup_logging

logger = logging.getLogger('commandkit.bot')


def create_bot(config) -> commands.Bot:
    """Create a bot with CommandKit attached and initialized in setup_hook"""
    intents = discord.Intents.default()

    bot = commands.Bot(
        command_prefix=commands.when_mentioned,
        intents=intents,
        tree_cls=CommandKitTree
    )
    kit = CommandKit.from_config(bot, config)

    async def setup_hook():
        await kit.init()
        logger.info(f"CommandKit is handling {len(kit.commands)} commands")

    bot.setup_hook = setup_hook
    return bot


def main():
    """Main entry point"""
    try:
        config = ConfigurationManager().load_configuration()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(config.log_level, config.log_file_path)

    if not config.bot_token:
        logger.error("BOT_TOKEN environment variable is required")
        sys.exit(1)

    bot = create_bot(config)
    try:
        bot.run(config.bot_token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Bot shutdown requested")


if __name__ == "__main__":
    main()
