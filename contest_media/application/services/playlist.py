"""HLS playlist rewriting."""

from urllib.parse import quote


def _is_absolute(reference: str) -> bool:
    return "://" in reference or reference.startswith("/")


def playlist_directory(playlist_key: str) -> str:
    """Return the key prefix (with trailing slash) that holds a playlist."""
    return playlist_key[: playlist_key.rfind("/") + 1]


def rewrite_playlist(content: str, playlist_key: str, segment_proxy_url: str) -> str:
    """Point every relative media reference of a playlist at the segment proxy.

    Directive/comment lines (starting with `#`) and blank lines are copied
    unchanged, as are absolute URLs. Any other line is taken as a reference
    relative to the playlist's own directory and becomes
    `<segment_proxy_url>?key=<url-encoded object key>`.

    Args:
        content: Playlist text as stored.
        playlist_key: Object key of the playlist being served.
        segment_proxy_url: Absolute URL of the segment proxy endpoint.

    Returns:
        The rewritten playlist.
    """
    directory = playlist_directory(playlist_key)
    rewritten: list[str] = []

    for line in content.split("\n"):
        reference = line.strip()
        if not reference or reference.startswith("#") or _is_absolute(reference):
            rewritten.append(line)
            continue

        ending = "\r" if line.endswith("\r") else ""
        key = quote(directory + reference, safe="")
        rewritten.append(f"{segment_proxy_url}?key={key}{ending}")

    return "\n".join(rewritten)
