import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Root logging setup shared by the API server and the Streamlit UI."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # the SDK's HTTP client is chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
