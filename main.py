"""
House Cup — Entry Point.

`python main.py` builds the configured household's session, starts (or
resumes) this week's challenge and logs its window and scores.
"""

import logging

from src.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.core.challenge_session import create_session
from src.core.day_key import format_day_key_range

logger = logging.getLogger(__name__)


def main() -> None:
    session = create_session(settings)
    challenge = session.start_challenge(prize=settings.DEFAULT_PRIZE)
    logger.info(
        "House Cup week %s (%s), prize: %s",
        format_day_key_range(challenge.start_day_key, challenge.end_day_key),
        settings.HOUSEHOLD_TIMEZONE,
        challenge.prize,
    )
    for score in session.scores().scores:
        logger.info("  %s: %d points", score.competitor_id, score.total)


if __name__ == "__main__":
    main()
