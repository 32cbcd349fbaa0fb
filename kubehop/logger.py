import logging

logger = logging.getLogger("kubehop")


def setup_logger(verbose: bool = False, format: str = "%(message)s") -> None:
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(logging.Formatter(format))

    logger.addHandler(ch)


setup_logger()
