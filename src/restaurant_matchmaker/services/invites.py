"""Invite link formatting."""

DEFAULT_INVITE_BASE_URL = "https://restaurantmatchmaker.vercel.app/invite"


def generate_invite_link(
    session_id: str, base_url: str = DEFAULT_INVITE_BASE_URL
) -> str:
    """Build the shareable URL a partner opens to join a session."""
    return f"{base_url.rstrip('/')}/{session_id}"
