#!/usr/bin/env python3
"""Generate a large synthetic CycloneDX SBOM for performance testing.

Components form a tree (component i depends on components 10i..10i+9) with
occasional forward cross-links and a few back-edges that create cycles.
Vulnerabilities are attached to random components.
"""

import json
import random
import sys
from datetime import UTC, datetime
from pathlib import Path


def component_ref(index: int) -> str:
    return f"pkg:npm/comp-{index}@1.0.0"


def generate_sbom(
    count: int = 20000,
    vuln_count: int = 500,
    cross_link_every: int = 50,
    cycle_every: int = 1000,
    seed: int = 42,
) -> dict:
    """Build the synthetic SBOM as a JSON-ready dict."""
    rng = random.Random(seed)

    components = [
        {
            "bom-ref": component_ref(i),
            "type": "library",
            "name": f"component-{i}",
            "version": "1.0.0",
            "purl": component_ref(i),
            "description": f"A large component for stress testing number {i}",
        }
        for i in range(count)
    ]

    depends_on: dict[int, list[int]] = {i: [] for i in range(count)}
    for i in range(100, count):
        depends_on[i // 10].append(i)

    for i in range(0, count - 1, cross_link_every):
        depends_on[i].append(rng.randrange(i + 1, count))

    # Back-edge to the grandparent closes a three-node cycle
    for i in range(1000, count, cycle_every):
        depends_on[i].append(i // 100)

    dependencies = [
        {"ref": component_ref(i), "dependsOn": [component_ref(t) for t in targets]}
        for i, targets in depends_on.items()
        if targets
    ]
    dependencies.append(
        {"ref": "root", "dependsOn": [component_ref(i) for i in range(min(100, count))]}
    )

    severities = ["critical", "high", "medium", "low", "info"]
    vulnerabilities = [
        {
            "id": f"CVE-STRESS-{i}",
            "description": f"A stress test vulnerability number {i}",
            "ratings": [{"severity": severities[i % len(severities)], "score": 9.0}],
            "affects": [{"ref": component_ref(rng.randrange(count))}],
        }
        for i in range(vuln_count)
    ]

    return {
        "bomFormat": "CycloneDX",
        "specVersion": "1.5",
        "metadata": {
            "timestamp": datetime.now(UTC).isoformat(),
            "component": {
                "bom-ref": "root",
                "type": "application",
                "name": "Huge-App",
                "version": "1.0.0",
            },
        },
        "components": components,
        "dependencies": dependencies,
        "vulnerabilities": vulnerabilities,
    }


def main() -> int:
    """Run the generator script."""
    import argparse

    parser = argparse.ArgumentParser(description="Generate a large synthetic CycloneDX SBOM")
    parser.add_argument("--count", type=int, default=20000, help="Number of components")
    parser.add_argument("--vulns", type=int, default=500, help="Number of vulnerabilities")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("sbom-huge.cyclonedx.json"),
        help="Output file (default: sbom-huge.cyclonedx.json)",
    )

    args = parser.parse_args()

    sbom = generate_sbom(count=args.count, vuln_count=args.vulns, seed=args.seed)
    with args.output.open("w") as f:
        json.dump(sbom, f, indent=2)

    print(f"Generated {args.output} with {args.count} components")
    return 0


if __name__ == "__main__":
    sys.exit(main())
