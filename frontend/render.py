"""
HTML fragments for the chat page.
Every string from the user or the Maps provider is escaped before it lands in markup.
"""
import re
from html import escape
from urllib.parse import quote

PLACE_URL = "https://www.google.com/maps/place/?q=place_id:{}"

_BOLD = re.compile(r'\*\*(.+?)\*\*')
_LINK = re.compile(r'\[([^\]]+?)\]\((https?://[^\s)]+)\)')


def markdown_to_html(text: str) -> str:
    """Convert bold and http(s) Markdown links to HTML. Anything else stays literal text."""
    text = escape(text)
    text = _BOLD.sub(r'<b>\1</b>', text)
    text = _LINK.sub(r'<a href="\2" target="_blank" rel="noopener noreferrer">\1</a>', text)
    return text.replace('\n', '<br>')


def assistant_html(content: str) -> str:
    return f'<div class="chat-message assistant-message"><b>📍 MapChat:</b><br><br>{markdown_to_html(content)}</div>'


def user_message_html(text: str) -> str:
    return f'<div class="chat-message user-message"><b>You:</b><br>{escape(text)}</div>'


def error_html(text: str) -> str:
    return f'<div class="chat-message error-message">❌ {escape(text)}</div>'


def place_card_html(place: dict) -> str:
    """One card: linked name, address, rating, distance and open-now badge"""
    rating = place.get("rating")
    details = [f"⭐ {escape(str(rating))}" if rating else "⭐ N/A"]
    if place.get("distance_text"):
        details.append(f"📏 {escape(place['distance_text'])}")
    opening_hours = place.get("opening_hours") or {}
    if opening_hours.get("open_now") is not None:
        details.append("🟢 Open now" if opening_hours["open_now"] else "🔴 Closed")

    address = escape(place.get("formatted_address") or place.get("vicinity") or "")
    name = escape(place.get("name") or "Unnamed place")
    if place.get("place_id"):
        link = escape(PLACE_URL.format(quote(place["place_id"], safe="")))
        name = f'<a href="{link}" target="_blank" rel="noopener noreferrer">{name}</a>'

    return f'<div class="place-card"><b>{name}</b><br><small>{address}</small><br>{" · ".join(details)}</div>'
