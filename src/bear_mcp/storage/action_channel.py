"""Write channel into Bear through its x-callback-url scheme.

Bear's database may only be written by Bear itself, so every change is sent as
a ``bear://x-callback-url/<action>?...`` URL and handed to the platform's URL
opener. A successful call means the opener accepted the URL. It does not mean
Bear has applied the change, and Bear may take a moment before the change
shows up on the read path.
"""

import logging
import shlex
import subprocess
from typing import List, Mapping, Optional, Protocol, Sequence, Union
from urllib.parse import quote

from bear_mcp.exceptions import ActionError
from bear_mcp.observability import log_context

logger = logging.getLogger(__name__)

# Characters JavaScript's encodeURIComponent leaves alone, besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"


class WriteActionChannel(Protocol):
    """Anything that can deliver a named action with parameters to Bear."""

    def call(self, action: str, params: Mapping[str, str]) -> None:
        ...


def encode_component(value: str) -> str:
    """Percent-encode a query string component like encodeURIComponent."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


class UrlSchemeActionChannel:
    """Dispatches Bear actions as callback URLs through a URL opener.

    Attributes:
        scheme: URL scheme registered by the app (``bear``)
        open_command: Command plus arguments; the URL is appended as the
            last argument.
    """

    def __init__(
        self,
        scheme: str = "bear",
        open_command: Union[str, Sequence[str]] = "open",
    ):
        self.scheme = scheme
        if isinstance(open_command, str):
            self.open_command: List[str] = shlex.split(open_command)
        else:
            self.open_command = list(open_command)

    def build_url(self, action: str, params: Optional[Mapping[str, str]] = None) -> str:
        """Build the callback URL for an action.

        Args:
            action: x-callback-url action name (e.g. "create", "add-text")
            params: Parameters, sent in the given order

        Returns:
            ``<scheme>://x-callback-url/<action>?k=v&...`` with every value
            percent-encoded.
        """
        url = f"{self.scheme}://x-callback-url/{action}"
        if params:
            query = "&".join(
                f"{key}={encode_component(str(value))}" for key, value in params.items()
            )
            url = f"{url}?{query}"
        return url

    def call(self, action: str, params: Mapping[str, str]) -> None:
        """Hand an action to Bear.

        Raises:
            ActionError: If the URL opener is missing or reports failure.
        """
        url = self.build_url(action, params)
        try:
            subprocess.run(
                [*self.open_command, url],
                check=True,
                capture_output=True,
                text=True,
            )
        except (OSError, subprocess.CalledProcessError) as e:
            stderr = getattr(e, "stderr", None)
            logger.error(
                "Bear URL call failed",
                extra=log_context(action=action, params=dict(params), error=str(e), stderr=stderr),
            )
            raise ActionError(action, params, original_error=e) from e

        logger.debug("Called Bear URL", extra=log_context(action=action, params=dict(params)))
