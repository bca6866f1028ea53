"""Persisted form of content manifests.

Manifests are stored as JSON documents (see schemas/content_manifest.schema.json)
where every manifest id is a plain string. Reading validates the document
against the schema and then every id against the identifier grammar; a
persisted id is never trusted as-is.
"""

import json
import logging
from pathlib import Path
from typing import Any

from .core.errors import InvalidFormat
from .core.manifest_id import ManifestId
from .core.types import (
    ConflictRuleDict,
    ConflictType,
    ContentDependencyDict,
    ContentManifestDict,
    ContentType,
    DependencyInstallBehavior,
    GameType,
    ResolutionStrategy,
    VersionRangeDict,
)
from .core.validator import validate_manifest_document
from .core.versions import VersionRange
from .models import (
    ConflictRule,
    ContentDependency,
    ContentManifest,
    InstallationInstructions,
    ManifestFile,
    PublisherInfo,
)

logger = logging.getLogger(__name__)


def manifest_id_from_string(value: str, field_name: str, allow_legacy: bool | None = None) -> ManifestId:
    """Convert a persisted id string into a ManifestId.

    Raises:
        InvalidFormat: With the field name in the message
    """
    try:
        return ManifestId(value, allow_legacy=allow_legacy)
    except InvalidFormat as e:
        raise InvalidFormat(f"{field_name}: {e.reason}", value=value, context={"field": field_name}) from e


def manifest_id_to_string(manifest_id: ManifestId) -> str:
    return manifest_id.value


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def _version_range_from_dict(data: VersionRangeDict | None) -> VersionRange | None:
    if data is None:
        return None
    return VersionRange(
        min_version=data.get("minVersion"),
        max_version=data.get("maxVersion"),
        min_inclusive=data.get("minInclusive", True),
        max_inclusive=data.get("maxInclusive", True),
        exact_version=data.get("exactVersion"),
        constraint_expression=data.get("constraintExpression"),
    )


def dependency_from_dict(
    data: ContentDependencyDict, field_name: str = "dependency", allow_legacy: bool | None = None
) -> ContentDependency:
    return ContentDependency(
        id=manifest_id_from_string(data["id"], f"{field_name}.id", allow_legacy),
        name=data.get("name", ""),
        dependency_type=ContentType(data.get("dependencyType", ContentType.UnknownContentType.value)),
        publisher_type=data.get("publisherType"),
        strict_publisher=data.get("strictPublisher", False),
        min_version=data.get("minVersion"),
        max_version=data.get("maxVersion"),
        exact_version=data.get("exactVersion"),
        compatible_versions=tuple(data.get("compatibleVersions", [])),
        compatible_game_types=tuple(GameType(g) for g in data.get("compatibleGameTypes", [])),
        is_exclusive=data.get("isExclusive", False),
        conflicts_with=tuple(
            manifest_id_from_string(c, f"{field_name}.conflictsWith", allow_legacy)
            for c in data.get("conflictsWith", [])
        ),
        install_behavior=DependencyInstallBehavior(
            data.get("installBehavior", DependencyInstallBehavior.RequireExisting.value)
        ),
        is_optional=data.get("isOptional", False),
        required_publisher_types=tuple(data.get("requiredPublisherTypes", [])),
        incompatible_publisher_types=tuple(data.get("incompatiblePublisherTypes", [])),
    )


def conflict_rule_from_dict(
    data: ConflictRuleDict, field_name: str = "conflictRule", allow_legacy: bool | None = None
) -> ConflictRule:
    return ConflictRule(
        conflicting_content_id=manifest_id_from_string(
            data["conflictingContentId"], f"{field_name}.conflictingContentId", allow_legacy
        ),
        conflict_type=ConflictType(data.get("conflictType", ConflictType.HardConflict.value)),
        resolution_strategy=ResolutionStrategy(
            data.get("resolutionStrategy", ResolutionStrategy.Block.value)
        ),
        conflict_version_range=_version_range_from_dict(data.get("conflictVersionRange")),
        reason=data.get("reason", ""),
        resolution_message=data.get("resolutionMessage", ""),
    )


def manifest_from_dict(document: Any, *, allow_legacy: bool | None = None) -> ContentManifest:
    """Build a ContentManifest from its persisted form.

    Args:
        document: Decoded JSON document
        allow_legacy: Accept deprecated simple ids (defaults to settings)

    Returns:
        ContentManifest instance

    Raises:
        ManifestValidationError: If the document doesn't match the schema
        InvalidFormat: If any id violates the identifier grammar
    """
    validate_manifest_document(document)
    data: ContentManifestDict = document

    publisher = data.get("publisher", {})
    instructions = data.get("installationInstructions", {})

    manifest = ContentManifest(
        id=manifest_id_from_string(data["id"], "id", allow_legacy),
        name=data["name"],
        version=data["version"],
        content_type=ContentType(data["contentType"]),
        target_game=GameType(data["targetGame"]),
        publisher=PublisherInfo(
            name=publisher.get("name", ""),
            publisher_type=publisher.get("publisherType", ""),
            website=publisher.get("website", ""),
            support_url=publisher.get("supportUrl", ""),
            contact_email=publisher.get("contactEmail", ""),
        ),
        dependencies=tuple(
            dependency_from_dict(dep, f"dependencies[{i}]", allow_legacy)
            for i, dep in enumerate(data.get("dependencies", []))
        ),
        conflict_rules=tuple(
            conflict_rule_from_dict(rule, f"conflictRules[{i}]", allow_legacy)
            for i, rule in enumerate(data.get("conflictRules", []))
        ),
        content_references=tuple(
            manifest_id_from_string(ref, "contentReferences", allow_legacy)
            for ref in data.get("contentReferences", [])
        ),
        files=tuple(
            ManifestFile(
                relative_path=f["relativePath"],
                size=f.get("size", 0),
                hash=f.get("hash", ""),
                source_type=f.get("sourceType", ""),
                is_executable=f.get("isExecutable", False),
            )
            for f in data.get("files", [])
        ),
        installation=InstallationInstructions(
            pre_install_steps=tuple(instructions.get("preInstallSteps", [])),
            post_install_steps=tuple(instructions.get("postInstallSteps", [])),
            workspace_strategy=instructions.get("workspaceStrategy", ""),
        ),
        manifest_version=data.get("manifestVersion", "1.0"),
        description=data.get("description", ""),
        tags=tuple(data.get("tags", [])),
    )
    logger.debug("Loaded manifest %s (%d dependencies, %d conflict rules)",
                 manifest.id, len(manifest.dependencies), len(manifest.conflict_rules))
    return manifest


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def _version_range_to_dict(version_range: VersionRange) -> VersionRangeDict:
    result: VersionRangeDict = {}
    if version_range.min_version is not None:
        result["minVersion"] = version_range.min_version
    if version_range.max_version is not None:
        result["maxVersion"] = version_range.max_version
    if not version_range.min_inclusive:
        result["minInclusive"] = False
    if not version_range.max_inclusive:
        result["maxInclusive"] = False
    if version_range.exact_version is not None:
        result["exactVersion"] = version_range.exact_version
    if version_range.constraint_expression is not None:
        result["constraintExpression"] = version_range.constraint_expression
    return result


def dependency_to_dict(dependency: ContentDependency) -> ContentDependencyDict:
    result: ContentDependencyDict = {
        "id": manifest_id_to_string(dependency.id),
        "name": dependency.name,
        "dependencyType": dependency.dependency_type.value,
        "strictPublisher": dependency.strict_publisher,
        "compatibleVersions": list(dependency.compatible_versions),
        "compatibleGameTypes": [g.value for g in dependency.compatible_game_types],
        "isExclusive": dependency.is_exclusive,
        "conflictsWith": [manifest_id_to_string(c) for c in dependency.conflicts_with],
        "installBehavior": dependency.install_behavior.value,
        "isOptional": dependency.is_optional,
        "requiredPublisherTypes": list(dependency.required_publisher_types),
        "incompatiblePublisherTypes": list(dependency.incompatible_publisher_types),
    }
    # Optional scalars are omitted rather than written as null
    if dependency.publisher_type is not None:
        result["publisherType"] = dependency.publisher_type
    if dependency.min_version is not None:
        result["minVersion"] = dependency.min_version
    if dependency.max_version is not None:
        result["maxVersion"] = dependency.max_version
    if dependency.exact_version is not None:
        result["exactVersion"] = dependency.exact_version
    return result


def conflict_rule_to_dict(rule: ConflictRule) -> ConflictRuleDict:
    result: ConflictRuleDict = {
        "conflictingContentId": manifest_id_to_string(rule.conflicting_content_id),
        "conflictType": rule.conflict_type.value,
        "resolutionStrategy": rule.resolution_strategy.value,
        "reason": rule.reason,
        "resolutionMessage": rule.resolution_message,
    }
    if rule.conflict_version_range is not None:
        result["conflictVersionRange"] = _version_range_to_dict(rule.conflict_version_range)
    return result


def manifest_to_dict(manifest: ContentManifest) -> ContentManifestDict:
    """Convert a ContentManifest into its persisted form."""
    return {
        "manifestVersion": manifest.manifest_version,
        "id": manifest_id_to_string(manifest.id),
        "name": manifest.name,
        "version": manifest.version,
        "contentType": manifest.content_type.value,
        "targetGame": manifest.target_game.value,
        "description": manifest.description,
        "tags": list(manifest.tags),
        "publisher": {
            "name": manifest.publisher.name,
            "publisherType": manifest.publisher.publisher_type,
            "website": manifest.publisher.website,
            "supportUrl": manifest.publisher.support_url,
            "contactEmail": manifest.publisher.contact_email,
        },
        "dependencies": [dependency_to_dict(d) for d in manifest.dependencies],
        "conflictRules": [conflict_rule_to_dict(r) for r in manifest.conflict_rules],
        "contentReferences": [manifest_id_to_string(r) for r in manifest.content_references],
        "files": [
            {
                "relativePath": f.relative_path,
                "size": f.size,
                "hash": f.hash,
                "sourceType": f.source_type,
                "isExecutable": f.is_executable,
            }
            for f in manifest.files
        ],
        "installationInstructions": {
            "preInstallSteps": list(manifest.installation.pre_install_steps),
            "postInstallSteps": list(manifest.installation.post_install_steps),
            "workspaceStrategy": manifest.installation.workspace_strategy,
        },
    }


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def load_manifest(path: Path, *, allow_legacy: bool | None = None) -> ContentManifest:
    """Read and validate a manifest file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the file is not valid JSON
        ManifestValidationError: If the document doesn't match the schema
        InvalidFormat: If any id violates the identifier grammar
    """
    with path.open("r", encoding="utf-8") as f:
        document = json.load(f)
    return manifest_from_dict(document, allow_legacy=allow_legacy)


def dump_manifest(manifest: ContentManifest, path: Path) -> None:
    """Write a manifest file as indented JSON."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(manifest_to_dict(manifest), f, indent=2)
        f.write("\n")
