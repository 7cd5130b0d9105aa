"""
GitHub Actions runner I/O: outputs, job summary and event payload
"""

import json
import uuid
from pathlib import Path
from typing import Any

from ..config import get_settings
from .logging import get_logger

logger = get_logger(__name__)


def set_output(name: str, value: Any, output_file: str | None = None) -> None:  # noqa: ANN401
    """
    Set a step output

    Writes to the file named by GITHUB_OUTPUT using the heredoc form, which
    is safe for multi-line values. Without an output file the value is logged
    in the legacy ``::set-output`` form so local runs still show it.

    Args:
        name: Output name
        value: Output value, converted with ``str()``
        output_file: Override for the GITHUB_OUTPUT path
    """
    output_file = output_file or get_settings().github_output
    value = str(value)

    if not output_file:
        logger.info("::set-output name=%s::%s", name, value)
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        msg = f"Unexpected input: name or value contains the delimiter {delimiter}"
        raise ValueError(msg)

    with Path(output_file).open("a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def set_outputs(outputs: dict[str, Any], output_file: str | None = None) -> None:
    """Set several step outputs at once"""
    for name, value in outputs.items():
        set_output(name, value, output_file)


def append_summary(markdown: str, summary_file: str | None = None) -> bool:
    """
    Append markdown to the job summary

    Returns:
        True if the summary was written, False when no summary file is configured
    """
    summary_file = summary_file or get_settings().github_step_summary
    if not summary_file:
        return False

    with Path(summary_file).open("a", encoding="utf-8") as f:
        f.write(markdown)
        if not markdown.endswith("\n"):
            f.write("\n")
    return True


def load_event(event_path: str | None = None) -> dict[str, Any]:
    """
    Load the webhook payload that triggered the workflow

    Returns:
        Event payload, or an empty dict when no event file is available
    """
    event_path = event_path or get_settings().github_event_path
    if not event_path or not Path(event_path).exists():
        logger.debug("No event payload available at %s", event_path)
        return {}

    return json.loads(Path(event_path).read_text(encoding="utf-8"))
