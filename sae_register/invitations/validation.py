"""Input checks and the HTML sanitization boundary for stored event descriptions."""

import nh3
from pydantic import EmailStr, TypeAdapter, ValidationError

from sae_register.invitations.exceptions import InvalidEmailError

_email_adapter = TypeAdapter(EmailStr)

# Event descriptions are authored in a rich-text editor; keep its formatting
# and links, drop everything that can run script.
ALLOWED_TAGS = {
    "a", "b", "blockquote", "br", "em", "h1", "h2", "h3", "h4", "hr", "i",
    "li", "ol", "p", "span", "strong", "u", "ul",
}
ALLOWED_ATTRIBUTES = {
    "a": {"href", "title", "target"},
}


def validate_email(email: str) -> str:
    """Return the normalized email or raise ``InvalidEmailError``."""
    candidate = (email or "").strip()
    try:
        return _email_adapter.validate_python(candidate)
    except ValidationError as e:
        raise InvalidEmailError(candidate) from e


def sanitize_description(raw_html: str | None) -> str:
    if not raw_html:
        return ""
    # descriptions imported from the spreadsheet arrive with escaped quotes
    return nh3.clean(
        raw_html.replace("\\", ""),
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        url_schemes={"http", "https", "mailto"},
        link_rel="noopener noreferrer",
    )
