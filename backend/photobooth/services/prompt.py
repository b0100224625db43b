"""Prompt template rendering."""
import re
from typing import Mapping, Optional

_TOKEN = re.compile(r"{{(.*?)}}")


def render_prompt(template: str, variables: Mapping[str, Optional[str]]) -> str:
    """Fill ``{{name}}`` placeholders from ``variables``.

    Whitespace inside the braces is ignored. Unknown or empty variables
    render as the empty string; a token is never left in the output.

    Args:
        template: Template text, e.g. ``"Portrait of {{ name }}"``.
        variables: Flat mapping of placeholder name to value.

    Returns:
        The rendered prompt.
    """
    return _TOKEN.sub(lambda match: variables.get(match.group(1).strip()) or "", template)
