import logging

logger = logging.getLogger("website_deploy")


class StatusReporter:
    """Progress lines go to stdout, detail goes to the log."""

    def status(self, message: str):
        print(message)

    def debug(self, message: str):
        logger.debug(message)
