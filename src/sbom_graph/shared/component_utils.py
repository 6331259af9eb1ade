"""
Component identity and metadata helpers shared by the loader and the merger.

Components coming from different scanners rarely agree on bom-refs, so
matching works on normalized identity keys:
1. Package-URL match (``purl:<purl>``)
2. Case-insensitive name plus version (``nv:<name>@<version>``), used only
   when one of the two components has no purl
"""

from typing import Any


class ComponentNormalizer:
    """Handles component name normalization for case-insensitive matching."""

    @staticmethod
    def normalize_name(component_name: str | None) -> str:
        """Normalize component name for case-insensitive comparison.

        Args:
            component_name: Original component name

        Returns:
            Normalized component name (lowercase, stripped)
        """
        if not component_name:
            return ""
        return component_name.lower().strip()

    @staticmethod
    def normalize_component_key(component: dict[str, Any]) -> str:
        """Generate normalized key for component deduplication.

        Args:
            component: Component dictionary with name and version

        Returns:
            Normalized component key in format "name@version"
        """
        name = ComponentNormalizer.normalize_name(component.get("name"))
        version = str(component.get("version") or "unknown").strip()
        return f"{name}@{version}"

    @staticmethod
    def identity_keys(component: dict[str, Any]) -> list[str]:
        """All identity keys of a raw component, strongest first.

        A component without a name contributes no name@version key, so two
        anonymous components never match each other by accident.
        """
        keys = []
        purl = component.get("purl")
        if purl:
            keys.append(f"purl:{purl}")
        if component.get("name"):
            keys.append(f"nv:{ComponentNormalizer.normalize_component_key(component)}")
        return keys

    @staticmethod
    def components_match(comp1: dict[str, Any], comp2: dict[str, Any]) -> bool:
        """Check if two raw components describe the same package.

        When both carry a purl the purls decide; name@version is only the
        fallback for a side without one.
        """
        if comp1.get("purl") and comp2.get("purl"):
            return comp1["purl"] == comp2["purl"]
        if not (comp1.get("name") and comp2.get("name")):
            return False
        return ComponentNormalizer.normalize_component_key(
            comp1
        ) == ComponentNormalizer.normalize_component_key(comp2)


def synthesize_ref(component: dict[str, Any]) -> str | None:
    """Node identifier for a raw component: bom-ref, then purl, then group/name@version."""
    ref = component.get("bom-ref") or component.get("purl")
    if ref:
        return str(ref)
    name = component.get("name")
    if not name:
        return None
    version = component.get("version")
    label = f"{component['group']}/{name}" if component.get("group") else str(name)
    return f"{label}@{version}" if version else label


def metadata_flags(component: dict[str, Any]) -> dict[str, bool]:
    """Presence of the metadata fields compared across sources."""
    return {
        "has_purl": bool(component.get("purl")),
        "has_licenses": bool(component.get("licenses")),
        "has_hashes": bool(component.get("hashes")),
    }


# Exact SPDX identifiers; anything else goes through the prefix rules
LICENSE_MAPPING = {
    # Permissive
    "MIT": "permissive",
    "ISC": "permissive",
    "Apache-2.0": "permissive",
    "BSD-2-Clause": "permissive",
    "BSD-3-Clause": "permissive",
    "CC0-1.0": "permissive",
    "Unlicense": "permissive",
    "0BSD": "permissive",
    # Copyleft
    "GPL-1.0-only": "copyleft",
    "GPL-1.0-or-later": "copyleft",
    "GPL-2.0-only": "copyleft",
    "GPL-2.0-or-later": "copyleft",
    "GPL-3.0-only": "copyleft",
    "GPL-3.0-or-later": "copyleft",
    "AGPL-3.0-only": "copyleft",
    "AGPL-3.0-or-later": "copyleft",
    # Weak copyleft
    "LGPL-2.0-only": "weak-copyleft",
    "LGPL-2.0-or-later": "weak-copyleft",
    "LGPL-2.1-only": "weak-copyleft",
    "LGPL-2.1-or-later": "weak-copyleft",
    "LGPL-3.0-only": "weak-copyleft",
    "LGPL-3.0-or-later": "weak-copyleft",
    "MPL-2.0": "weak-copyleft",
    "EPL-1.0": "weak-copyleft",
    "EPL-2.0": "weak-copyleft",
}


def license_category(license_id: str | None) -> str:
    """Determine the category of a license.

    Args:
        license_id: SPDX identifier or free-form license name

    Returns:
        One of 'permissive', 'copyleft', 'weak-copyleft', 'proprietary', 'unknown'
    """
    if not license_id:
        return "unknown"

    if license_id in LICENSE_MAPPING:
        return LICENSE_MAPPING[license_id]

    # Versioned or non-canonical spellings, e.g. "GPL-3.0"
    upper = license_id.upper()
    if upper.startswith(("GPL", "AGPL")):
        return "copyleft"
    if upper.startswith(("LGPL", "MPL", "EPL")):
        return "weak-copyleft"
    if upper.startswith(("MIT", "APACHE", "BSD", "ISC")):
        return "permissive"
    if any(keyword in upper for keyword in ("PROPRIETARY", "COMMERCIAL")):
        return "proprietary"

    return "unknown"
