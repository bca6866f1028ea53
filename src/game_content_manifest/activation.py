"""Combined activation verdict.

Workspace assembly only needs to know whether a proposed set of manifests
may be activated, which manifests remain after conflict resolution, and any
warnings or merge flags. evaluate_activation() runs conflict resolution and
dependency validation together and reports a single ActivationVerdict.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .conflicts import ConflictResolution, ConflictResolver, DecisionRequest, DroppedContent
from .core.errors import ConflictBlocked, DependencyMissing
from .core.manifest_id import ManifestId
from .core.types import ResolutionState
from .dependencies import check_dependency_exclusivity, evaluate_dependencies
from .models import ContentDependency, ContentManifest

logger = logging.getLogger(__name__)


@dataclass
class ActivationVerdict:
    """Outcome of an activation request."""

    state: ResolutionState
    manifests: list[ContentManifest]
    resolution: ConflictResolution
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    missing_dependencies: dict[ManifestId, list[ManifestId]] = field(default_factory=dict)
    advisory_dependencies: dict[ManifestId, list[ContentDependency]] = field(default_factory=dict)
    available: dict[ManifestId, ContentManifest] = field(default_factory=dict)

    @property
    def allowed(self) -> bool:
        return self.state in (
            ResolutionState.Allowed,
            ResolutionState.Warned,
            ResolutionState.FlaggedForMerge,
        )

    @property
    def dropped(self) -> list[DroppedContent]:
        return self.resolution.dropped

    @property
    def merge_candidates(self) -> list[tuple[ManifestId, ManifestId]]:
        return [(o.owner_id, o.other_id) for o in self.resolution.merge_candidates]

    @property
    def decision_request(self) -> DecisionRequest | None:
        return self.resolution.decision_request

    @property
    def missing_ids(self) -> list[ManifestId]:
        """Every missing dependency id, without duplicates, in report order."""
        seen: dict[ManifestId, None] = {}
        for missing in self.missing_dependencies.values():
            for manifest_id in missing:
                seen.setdefault(manifest_id, None)
        return list(seen)

    def apply_decision(self, keep_id: ManifestId | str) -> "ActivationVerdict":
        """Answer the pending user choice and re-check dependencies.

        Returns:
            New verdict for the reduced set
        """
        self.resolution.apply_decision(keep_id)
        return _build_verdict(self.resolution, self.available)

    def reject(self, reason: str = "Rejected by user") -> "ActivationVerdict":
        """Decline the pending user choice, blocking activation."""
        self.resolution.reject(reason)
        return _build_verdict(self.resolution, self.available)

    def raise_for_state(self) -> None:
        """Raise DependencyMissing or ConflictBlocked for a blocked verdict."""
        if self.state is not ResolutionState.Blocked:
            return
        if self.missing_dependencies:
            raise DependencyMissing(self.missing_ids)
        self.resolution.raise_for_state()
        raise ConflictBlocked("activation set", "activation set", "; ".join(self.errors))

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly summary, as printed by the CLI."""
        request = self.decision_request
        return {
            "state": self.state.value,
            "allowed": self.allowed,
            "manifests": [str(m.id) for m in self.manifests],
            "warnings": list(self.warnings),
            "errors": list(self.errors),
            "missingDependencies": {
                str(owner): [str(m) for m in missing] for owner, missing in self.missing_dependencies.items()
            },
            "advisoryDependencies": {
                str(owner): [str(d.id) for d in deps] for owner, deps in self.advisory_dependencies.items()
            },
            "dropped": [
                {"dropped": str(d.dropped_id), "kept": str(d.kept_id), "reason": d.reason}
                for d in self.dropped
            ],
            "mergeCandidates": [[str(a), str(b)] for a, b in self.merge_candidates],
            "decisionRequest": None if request is None else {
                "options": [str(o) for o in request.options],
                "message": request.message,
            },
        }


def _build_verdict(
    resolution: ConflictResolution,
    extra_available: Mapping[ManifestId, ContentManifest],
) -> ActivationVerdict:
    active = list(resolution.manifests)
    available: dict[ManifestId, ContentManifest] = dict(extra_available)
    available.update((m.id, m) for m in active)

    verdict = ActivationVerdict(
        state=resolution.state,
        manifests=active,
        resolution=resolution,
        warnings=list(resolution.warnings),
        errors=list(resolution.errors),
        available=dict(extra_available),
    )

    for manifest in active:
        report = evaluate_dependencies(manifest, available)
        if report.missing:
            verdict.missing_dependencies[manifest.id] = report.missing
            verdict.errors.append(
                f"Missing required dependencies for {manifest.id}: "
                f"{', '.join(str(m) for m in report.missing)}"
            )
        if report.advisory:
            verdict.advisory_dependencies[manifest.id] = report.advisory

    exclusivity_errors = check_dependency_exclusivity(active)
    verdict.errors.extend(exclusivity_errors)

    if verdict.missing_dependencies or exclusivity_errors:
        verdict.state = ResolutionState.Blocked

    logger.debug("Activation verdict for %d manifests: %s", len(active), verdict.state.value)
    return verdict


def evaluate_activation(
    manifests: Iterable[ContentManifest],
    available: Mapping[ManifestId | str, ContentManifest] | Iterable[ContentManifest] | None = None,
    existing_ids: Iterable[ManifestId | str] = (),
) -> ActivationVerdict:
    """Decide whether a set of manifests may be activated together.

    Args:
        manifests: Proposed activation set, in priority order
        available: Manifests that may satisfy dependencies besides the set
                   itself (e.g. detected game installations)
        existing_ids: Ids already installed, used by PreferExisting rules

    Returns:
        ActivationVerdict. Blocked when a Block rule triggers, a required
        dependency is missing, or an exclusivity declaration is violated.

    Raises:
        InvalidFormat: If a conflict rule's version range meets an unparseable version
    """
    extra: dict[ManifestId, ContentManifest] = {}
    if available is not None:
        values = available.values() if isinstance(available, Mapping) else available
        extra = {m.id: m for m in values}

    resolution = ConflictResolver().resolve(manifests, existing_ids)
    return _build_verdict(resolution, extra)
