"""Dependency evaluation and resolution.

satisfies() decides whether one candidate manifest fulfils a declared
dependency; validate_dependencies() checks a manifest against the set of
available manifests. "Not satisfied" is a normal outcome here, reported
through return values rather than exceptions.

DependencyResolver walks dependencies transitively through a manifest
cache to build the full set of content a selection needs.
"""

import logging
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .core.errors import InvalidFormat
from .core.manifest_id import ManifestId
from .core.types import DependencyInstallBehavior
from .core.versions import VersionRange, parse_version, versions_equal
from .models import ContentDependency, ContentManifest
from .sources.base import ManifestCache

logger = logging.getLogger(__name__)

# Behaviors the resolver follows transitively
_FOLLOWED_BEHAVIORS = (
    DependencyInstallBehavior.RequireExisting,
    DependencyInstallBehavior.AutoInstall,
)


def _version_matches(dependency: ContentDependency, version: str) -> bool:
    if not version:
        return False
    try:
        parse_version(version)
        if dependency.exact_version and versions_equal(version, dependency.exact_version):
            return True
        if dependency.min_version or dependency.max_version:
            bounds = VersionRange(min_version=dependency.min_version, max_version=dependency.max_version)
            if bounds.is_satisfied_by(version):
                return True
        return any(
            versions_equal(version, compatible) for compatible in dependency.compatible_versions
        )
    except InvalidFormat as e:
        logger.debug("Version check for dependency %s failed: %s", dependency.id, e)
        return False


def _publisher_matches(dependency: ContentDependency, candidate: ContentManifest) -> bool:
    publisher_type = candidate.publisher.publisher_type.lower()

    if dependency.strict_publisher:
        expected = dependency.publisher_type or dependency.id.publisher or ""
        return publisher_type == expected.lower()

    required = {p.lower() for p in dependency.required_publisher_types}
    if required and publisher_type not in required:
        return False

    incompatible = {p.lower() for p in dependency.incompatible_publisher_types}
    return publisher_type not in incompatible


def satisfies(dependency: ContentDependency, candidate: ContentManifest) -> bool:
    """Check whether a candidate manifest satisfies a dependency.

    The candidate must match by identity (same id) or by version (within
    min/max, equal to the exact version, or listed as compatible; version
    matching only considers candidates of the dependency's content type).
    On top of that its target game must be compatible when the dependency
    lists game types, and the publisher constraints must hold.

    Args:
        dependency: The declared dependency
        candidate: Manifest that might fulfil it

    Returns:
        True if the candidate satisfies the dependency
    """
    id_match = candidate.id == dependency.id
    version_match = (
        not id_match
        and dependency.has_version_constraint
        and candidate.content_type is dependency.dependency_type
        and _version_matches(dependency, candidate.version)
    )
    if not (id_match or version_match):
        return False

    if dependency.compatible_game_types and candidate.target_game not in dependency.compatible_game_types:
        return False

    return _publisher_matches(dependency, candidate)


def _lookup(available: Mapping[ManifestId | str, ContentManifest], manifest_id: ManifestId) -> ContentManifest | None:
    found = available.get(manifest_id)
    if found is None:
        found = available.get(manifest_id.value) or available.get(manifest_id.normalized)
    return found


def find_satisfying(
    dependency: ContentDependency,
    available: Mapping[ManifestId | str, ContentManifest],
) -> ContentManifest | None:
    """Return the first available manifest that satisfies a dependency."""
    direct = _lookup(available, dependency.id)
    if direct is not None and satisfies(dependency, direct):
        return direct

    if dependency.has_version_constraint:
        for candidate in available.values():
            if candidate is not direct and satisfies(dependency, candidate):
                return candidate
    return None


@dataclass
class DependencyReport:
    """Dependency outcome for one manifest."""

    manifest_id: ManifestId
    missing: list[ManifestId] = field(default_factory=list)
    advisory: list[ContentDependency] = field(default_factory=list)

    @property
    def satisfied(self) -> bool:
        return not self.missing


def evaluate_dependencies(
    manifest: ContentManifest,
    available: Mapping[ManifestId | str, ContentManifest],
) -> DependencyReport:
    """Check every dependency of a manifest against the available set.

    Required dependencies (RequireExisting, not optional) that nothing
    satisfies are listed as missing. Suggest, AutoInstall and optional
    dependencies never count as missing; they are listed as advisory
    whether or not they are available.
    """
    report = DependencyReport(manifest.id)
    for dependency in manifest.dependencies:
        if not dependency.is_blocking:
            logger.debug(
                "Dependency %s of %s is advisory (%s, optional=%s)",
                dependency.id,
                manifest.id,
                dependency.install_behavior.value,
                dependency.is_optional,
            )
            report.advisory.append(dependency)
            continue

        if find_satisfying(dependency, available) is None:
            report.missing.append(dependency.id)

    if report.missing:
        logger.info(
            "Manifest %s is missing required dependencies: %s",
            manifest.id,
            ", ".join(str(m) for m in report.missing),
        )
    return report


def validate_dependencies(
    manifest: ContentManifest,
    available: Mapping[ManifestId | str, ContentManifest],
) -> bool:
    """Return True if every required dependency resolves against available.

    An empty dependency list trivially validates.
    """
    return evaluate_dependencies(manifest, available).satisfied


def find_missing_dependencies(
    manifest: ContentManifest,
    available: Mapping[ManifestId | str, ContentManifest],
) -> list[ManifestId]:
    """Return the ids of required dependencies nothing in available satisfies."""
    return evaluate_dependencies(manifest, available).missing


def check_dependency_exclusivity(manifests: Iterable[ContentManifest]) -> list[str]:
    """Check exclusivity declarations across a proposed activation set.

    A dependency listing conflicts_with ids may not be activated together
    with any of them. A dependency marked exclusive allows only one
    manifest of its dependency type in the set.

    Returns:
        Error messages, empty when the set is consistent
    """
    selected = list(manifests)
    ids = {m.id for m in selected}
    errors: list[str] = []

    for manifest in selected:
        for dependency in manifest.dependencies:
            for conflicting in dependency.conflicts_with:
                if conflicting in ids:
                    errors.append(
                        f"{manifest.id}: dependency {dependency.id} cannot be used together with {conflicting}"
                    )

            if dependency.is_exclusive:
                same_type = sorted(
                    str(m.id)
                    for m in selected
                    if m.content_type is dependency.dependency_type
                    and (not dependency.compatible_game_types or m.target_game in dependency.compatible_game_types)
                )
                if len(same_type) > 1:
                    errors.append(
                        f"{manifest.id}: dependency {dependency.id} is exclusive but "
                        f"{len(same_type)} {dependency.dependency_type.value} items are selected: "
                        f"{', '.join(same_type)}"
                    )
    return errors


# ---------------------------------------------------------------------------
# Transitive resolution
# ---------------------------------------------------------------------------


@dataclass
class DependencyResolutionResult:
    """Result of resolving a selection of content ids transitively."""

    success: bool
    resolved_ids: list[ManifestId] = field(default_factory=list)
    resolved_manifests: list[ContentManifest] = field(default_factory=list)
    missing_ids: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def first_error(self) -> str | None:
        return self.errors[0] if self.errors else None


class DependencyResolver:
    """Resolves content ids and their dependencies through a manifest cache.

    Dependencies with RequireExisting or AutoInstall are followed when they
    name a specific publisher (strict_publisher). Type-based dependencies
    such as "1.104.any.gameinstallation.zerohour" are satisfied by matching
    against the activation set instead, so they are not looked up here.

    Example:
        >>> resolver = DependencyResolver(InMemoryManifestCache(manifests))
        >>> result = resolver.resolve(["1.0.cnclabs.mod.urbanchaos"])
        >>> result.success, [str(i) for i in result.resolved_ids]
    """

    def __init__(self, cache: ManifestCache):
        self.cache = cache

    def resolve(self, content_ids: Iterable[ManifestId | str]) -> DependencyResolutionResult:
        resolved: dict[ManifestId, ContentManifest] = {}
        missing: list[str] = []
        edges: dict[ManifestId, list[ManifestId]] = {}
        queue: deque[ManifestId | str] = deque(content_ids)
        visited: set[str] = set()

        while queue:
            raw_id = queue.popleft()
            key = raw_id.lower() if isinstance(raw_id, str) else raw_id.normalized
            if key in visited:
                continue
            visited.add(key)

            try:
                manifest_id = ManifestId.create(raw_id)
            except InvalidFormat as e:
                logger.warning("Invalid manifest ID during dependency resolution: %s (%s)", raw_id, e.reason)
                missing.append(str(raw_id))
                continue

            manifest = self.cache.get(manifest_id)
            if manifest is None:
                logger.warning("Manifest not found for content ID: %s", manifest_id)
                missing.append(str(manifest_id))
                continue

            resolved[manifest_id] = manifest
            edges[manifest_id] = []

            for dependency in manifest.dependencies:
                if dependency.install_behavior not in _FOLLOWED_BEHAVIORS:
                    continue
                if not dependency.strict_publisher:
                    logger.debug(
                        "Skipping type-based dependency %s of %s (validated by matching)",
                        dependency.id,
                        manifest_id,
                    )
                    continue
                if dependency.install_behavior is DependencyInstallBehavior.AutoInstall:
                    logger.debug("Dependency %s of %s is auto-installable", dependency.id, manifest_id)
                edges[manifest_id].append(dependency.id)
                if dependency.id.normalized not in visited:
                    queue.append(dependency.id)

        if missing:
            return DependencyResolutionResult(
                success=False,
                missing_ids=missing,
                errors=[f"Missing or invalid content IDs: {', '.join(missing)}"],
            )

        warnings = [
            f"Circular dependency detected: {' -> '.join(str(i) for i in cycle)}"
            for cycle in _find_cycles(edges)
        ]
        for warning in warnings:
            logger.warning(warning)

        return DependencyResolutionResult(
            success=True,
            resolved_ids=list(resolved),
            resolved_manifests=list(resolved.values()),
            warnings=warnings,
        )


def _find_cycles(edges: dict[ManifestId, list[ManifestId]]) -> list[list[ManifestId]]:
    """Return one path per back edge found by depth-first search."""
    cycles: list[list[ManifestId]] = []
    state: dict[ManifestId, int] = {}  # 1 = on stack, 2 = done

    for root in edges:
        if root in state:
            continue
        stack: list[tuple[ManifestId, int]] = [(root, 0)]
        path: list[ManifestId] = [root]
        state[root] = 1
        while stack:
            node, index = stack[-1]
            targets = edges.get(node, [])
            if index >= len(targets):
                stack.pop()
                path.pop()
                state[node] = 2
                continue
            stack[-1] = (node, index + 1)
            target = targets[index]
            if state.get(target) == 1:
                start = path.index(target)
                cycles.append(path[start:] + [target])
            elif target not in state and target in edges:
                state[target] = 1
                stack.append((target, 0))
                path.append(target)
    return cycles
