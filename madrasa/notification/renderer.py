"""Newsletter email rendering.

Fills ``templates/newsletter_email.html`` and ``newsletter_email.txt``
with ``string.Template`` placeholders.  Title and message are escaped
for the HTML body; message newlines become ``<br>``.
"""
from __future__ import annotations

import html
from dataclasses import dataclass
from pathlib import Path
from string import Template

from madrasa.core.constants import NOTIFICATION_NEWS

TEMPLATE_DIR = Path(__file__).parent / "templates"

_SUBJECT_PREFIX = {NOTIFICATION_NEWS: "📰 News Update"}
_BADGE = {NOTIFICATION_NEWS: "📰 News & Events"}
_LABEL = {NOTIFICATION_NEWS: "NEWS & EVENTS"}

_ACADEMIC_SUBJECT_PREFIX = "📚 Academic Update"
_ACADEMIC_BADGE = "📚 Academic Update"
_ACADEMIC_LABEL = "ACADEMIC UPDATE"

_CALL_TO_ACTION = (
    '<div style="text-align: center;">'
    '<a href="$link" class="button">View Details →</a>'
    "</div>"
)


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def _load(name: str, template_dir: Path) -> str:
    path = template_dir / name
    if not path.is_file():
        raise FileNotFoundError(f"Newsletter template {name!r} not found in {template_dir}")
    return path.read_text(encoding="utf-8")


def build_subject(notification_type: str, title: str) -> str:
    prefix = _SUBJECT_PREFIX.get(notification_type, _ACADEMIC_SUBJECT_PREFIX)
    return f"{prefix}: {title}"


def absolute_link(link: str | None, site_url: str) -> str | None:
    """Prefix site-relative links (``/absences``) with *site_url*."""
    if not link:
        return None
    if link.startswith("/"):
        return site_url.rstrip("/") + link
    return link


def render_email(
    notification_type: str,
    title: str,
    message: str,
    link: str | None,
    *,
    site_name: str,
    site_url: str,
    footer_note: str = "Thank you for staying connected with us!",
    template_dir: Path = TEMPLATE_DIR,
) -> RenderedEmail:
    """Render the subject, HTML body and text body for one notification."""
    link = absolute_link(link, site_url)

    call_to_action = ""
    if link:
        call_to_action = Template(_CALL_TO_ACTION).safe_substitute(link=html.escape(link, quote=True))

    html_body = Template(_load("newsletter_email.html", template_dir)).safe_substitute(
        title=html.escape(title),
        message=html.escape(message).replace("\n", "<br>"),
        badge=_BADGE.get(notification_type, _ACADEMIC_BADGE),
        call_to_action=call_to_action,
        site_name=html.escape(site_name),
        site_url=html.escape(site_url.rstrip("/"), quote=True),
        footer_note=html.escape(footer_note),
    )
    text_body = Template(_load("newsletter_email.txt", template_dir)).safe_substitute(
        title=title,
        message=message,
        label=_LABEL.get(notification_type, _ACADEMIC_LABEL),
        link_line=f"View more: {link}\n\n" if link else "",
        site_name=site_name,
        site_url=site_url.rstrip("/"),
        footer_note=footer_note,
    )
    return RenderedEmail(
        subject=build_subject(notification_type, title),
        html=html_body,
        text=text_body,
    )
