"""
Trusted origin policy

Some hosts (OneDrive, SharePoint) serve files whose extensions yt-dlp
refuses to write by default. References from an allowlisted host get the
relaxed extension option; everything else uses yt-dlp's defaults.
"""

from typing import Iterable, Optional, Tuple


def is_trusted_reference(reference: Optional[str], domains: Iterable[str]) -> bool:
    """
    Check whether a reference comes from a trusted origin

    Plain substring match, so "https://foo.sharepoint.com/..." matches
    "sharepoint.com".

    Args:
        reference: Remote URL (None or empty is never trusted)
        domains: Allowlisted domain names

    Returns:
        True if any domain occurs in the reference
    """
    if not reference:
        return False
    return any(domain and domain in reference for domain in domains)


class TrustPolicy:
    """Fixed allowlist of domains allowed to use relaxed download options"""

    def __init__(self, domains: Iterable[str]):
        self.domains: Tuple[str, ...] = tuple(d for d in domains if d)

    def is_trusted(self, reference: Optional[str]) -> bool:
        return is_trusted_reference(reference, self.domains)

    def __repr__(self) -> str:
        return f"TrustPolicy({list(self.domains)!r})"
