"""Shared helpers for reading external tool output."""

from typing import Iterable, List, Optional


class OutputParser:
    """Case-insensitive marker search over captured tool output."""

    @staticmethod
    def contains(text: str, marker: str) -> bool:
        if not marker:
            return False
        return marker.lower() in text.lower()

    @staticmethod
    def find_marker(text: str, markers: Iterable[str]) -> Optional[str]:
        """Return the first marker present in ``text``, or None."""
        lowered = text.lower()
        for marker in markers:
            if marker and marker.lower() in lowered:
                return marker
        return None

    @staticmethod
    def matching_lines(text: str, marker: str, limit: int = 3) -> List[str]:
        """Lines mentioning ``marker``, for diagnostics."""
        needle = marker.lower()
        return [line.strip() for line in text.splitlines() if needle in line.lower()][:limit]
