"""
Party affiliation normalization.

Hansard attributions and registry rows abbreviate party names in several
ways; this maps every known variant onto one canonical label.
"""

from typing import Dict, Optional

PARTY_MAPPINGS: Dict[str, str] = {
    "LAB": "Labour",
    "Lab": "Labour",
    "Lab/Co-op": "Labour",
    "LD": "Liberal Democrats",
    "CON": "Conservative",
    "Con": "Conservative",
    "CB": "Crossbench",
    "SNP": "SNP (Scottish National Party)",
}


def normalize_affiliation(raw: Optional[str]) -> Optional[str]:
    """Return the canonical party name; unknown labels pass through trimmed."""
    if raw is None:
        return None
    label = raw.strip()
    return PARTY_MAPPINGS.get(label, label)
