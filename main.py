"""Example runner — greets every sender by first name.

Uses the single-callback profile: one ``default`` callback handles every
message.  Configure ``BOT_TOKEN`` (and optionally ``DB_LOCATION``,
``POLL_TIMEOUT``, ``POLL_INTERVAL``) in the environment or a ``.env`` file.
"""

import time

from config import BOT_TOKEN, POLL_INTERVAL, POLL_TIMEOUT
from core.logger import WrapperLogger
from bot import BasePayload, Bot

logger = WrapperLogger.get_logger()


def make_greeter(bot: Bot):
    """Return a callback that answers each message with ``Hello <first_name>``."""

    def greet(payload: BasePayload) -> None:
        sender = payload.message.get("from") or {}
        first_name = sender.get("first_name", "there")
        if not bot.send_message(payload.chat_id, f"Hello {first_name}"):
            logger.warning("Greeting not delivered", extra={"chat_id": payload.chat_id})

    return greet


def main() -> None:
    if not BOT_TOKEN:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")

    with Bot(BOT_TOKEN) as bot:
        bot.set_callback(make_greeter(bot))
        logger.info("Bot is running. Polling for updates...", extra={"bot_username": bot.me.username})
        try:
            while True:
                dispatched = bot.check_for_messages(timeout=POLL_TIMEOUT)
                if dispatched:
                    logger.debug("Poll cycle finished", extra={"dispatched": dispatched})
                time.sleep(POLL_INTERVAL)
        except KeyboardInterrupt:
            logger.info("Stopped by user")


if __name__ == "__main__":
    main()
