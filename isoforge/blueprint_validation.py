from collections import Counter

from .models import Blueprint


def _duplicate_name_warnings(names: list[str]) -> list[str]:
    counts = Counter(names)
    return [f"duplicate artifact name: {name}" for name, count in counts.items() if count > 1]


def validate_blueprint_semantics(artifacts: Blueprint) -> list[str]:
    """Advisory checks only; the artifact list itself is never altered."""
    warnings: list[str] = []

    warnings.extend(_duplicate_name_warnings([artifact.name for artifact in artifacts]))

    for artifact in artifacts:
        if not artifact.name.strip():
            warnings.append("artifact with blank name")
        if not artifact.content.strip():
            warnings.append(f"empty artifact content: {artifact.name}")

    return warnings
