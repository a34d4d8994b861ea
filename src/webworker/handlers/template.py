"""
=============================================================================
HOME PAGE TEMPLATING
=============================================================================

The home page is a plain HTML file with two placeholders:

    <p>Served at {{cs371date}} by {{cs371server}}</p>
                      │                  │
                      ▼                  ▼
    <p>Served at 2026-01-15 12:30:45 by alice on web01/10.0.0.7</p>

Substitution is literal text replacement of every occurrence. There is no
escaping, no loops, no conditionals.

The page date is the server's LOCAL time in "%Y-%m-%d %H:%M:%S". It is
formatted independently of the GMT Date header, so the two usually
differ by the timezone offset.

=============================================================================
"""

import getpass
import logging
import socket
from datetime import datetime
from typing import Optional


logger = logging.getLogger(__name__)


DATE_TOKEN = "{{cs371date}}"
SERVER_TOKEN = "{{cs371server}}"

PAGE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_page_date(now: datetime) -> str:
    """Format a timestamp for the date placeholder."""
    return now.strftime(PAGE_DATE_FORMAT)


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError) as e:
        # No login name and no passwd entry, common in containers
        logger.debug(f"Cannot determine user name: {e}")
        return "unknown"


def _host_address() -> str:
    hostname = socket.gethostname() or "localhost"
    try:
        address = socket.gethostbyname(hostname)
    except OSError as e:
        logger.debug(f"Cannot resolve {hostname}: {e}")
        address = "127.0.0.1"
    return f"{hostname}/{address}"


def server_identity() -> str:
    """
    Identity string for the server placeholder.

    Format: "<user> on <hostname>/<address>", e.g. "alice on web01/10.0.0.7".
    Every part falls back to a placeholder, so the result is never empty.
    """
    return f"{_current_user()} on {_host_address()}"


def render_template(
    text: str,
    now: datetime,
    identity: str,
    date_token: str = DATE_TOKEN,
    server_token: str = SERVER_TOKEN,
) -> str:
    """
    Substitute both placeholders in a template.

    Args:
        text: Template source.
        now: Timestamp for the date placeholder.
        identity: Value for the server placeholder.
        date_token: Date placeholder to look for.
        server_token: Server placeholder to look for.

    Returns:
        The substituted page.
    """
    page = text.replace(date_token, format_page_date(now))
    return page.replace(server_token, identity)


class TemplatePage:
    """
    A template bound to its placeholder tokens and an identity.

    Without a fixed identity, user and host are looked up on every render,
    like the date.

    Usage:
        page = TemplatePage()
        html = page.render(source, datetime.now())
    """

    def __init__(
        self,
        date_token: str = DATE_TOKEN,
        server_token: str = SERVER_TOKEN,
        identity: Optional[str] = None,
    ):
        self.date_token = date_token
        self.server_token = server_token
        self._identity = identity

    @property
    def identity(self) -> str:
        """The fixed identity, or a fresh lookup if none was given."""
        return self._identity or server_identity()

    def render(self, text: str, now: datetime) -> str:
        """Substitute the placeholders in ``text``."""
        return render_template(
            text,
            now,
            self.identity,
            date_token=self.date_token,
            server_token=self.server_token,
        )
