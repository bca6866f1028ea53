"""Conflict rule evaluation and resolution.

Every manifest may declare conflict rules against other content ids. When a
set of manifests is proposed for activation, ConflictResolver checks each
pair in both directions and applies the resolution strategy of the first
rule that triggers for that pair:

    Block           the set is rejected
    Warn            the set is accepted with a warning
    PreferNewer     the older side is dropped
    PreferExisting  the side that is not already installed is dropped
    UserChoice      the caller has to pick one side
    Merge           the set is accepted and the pair is flagged for merging

The conflict type of a rule is descriptive only and never changes which
strategy applies.

A resolution request moves through

    Pending -> Evaluating -> Allowed | Blocked | Warned | AwaitingUserChoice | FlaggedForMerge

and only AwaitingUserChoice can move on, to Allowed or Blocked, once the
caller answers every decision request.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .core.errors import ConflictBlocked, ResolutionStateError
from .core.manifest_id import ManifestId
from .core.types import ResolutionState, ResolutionStrategy
from .core.versions import compare_versions
from .models import ConflictRule, ContentManifest

logger = logging.getLogger(__name__)

_TRANSITIONS: dict[ResolutionState, frozenset[ResolutionState]] = {
    ResolutionState.Pending: frozenset({ResolutionState.Evaluating}),
    ResolutionState.Evaluating: frozenset({
        ResolutionState.Allowed,
        ResolutionState.Blocked,
        ResolutionState.Warned,
        ResolutionState.AwaitingUserChoice,
        ResolutionState.FlaggedForMerge,
    }),
    ResolutionState.AwaitingUserChoice: frozenset({ResolutionState.Allowed, ResolutionState.Blocked}),
}

# Outcomes that let the set be activated
ALLOWED_STATES = frozenset({
    ResolutionState.Allowed,
    ResolutionState.Warned,
    ResolutionState.FlaggedForMerge,
})


def is_triggered(rule: ConflictRule, candidate_id: ManifestId | str, candidate_version: str | None = None) -> bool:
    """Check whether a conflict rule applies to a candidate.

    Args:
        rule: Rule owned by some manifest
        candidate_id: Id of the other content
        candidate_version: Version of the other content

    Returns:
        True if the ids match and the rule has no version range or the
        range is satisfied by candidate_version

    Raises:
        InvalidFormat: If the version range cannot parse the versions
    """
    if rule.conflicting_content_id != candidate_id:
        return False
    if rule.conflict_version_range is None:
        return True
    return rule.conflict_version_range.is_satisfied_by(candidate_version)


def first_triggered_rule(owner: ContentManifest, other: ContentManifest) -> ConflictRule | None:
    """Return the first rule of owner that triggers against other."""
    for rule in owner.conflict_rules:
        if is_triggered(rule, other.id, other.version):
            return rule
    return None


def _describe(owner: ContentManifest, other: ContentManifest, rule: ConflictRule) -> str:
    message = f"Content {owner.id} conflicts with {other.id}"
    if rule.conflict_version_range is not None:
        message += f" {rule.conflict_version_range.describe()}"
    message += f" ({rule.conflict_type.value})"
    if rule.reason:
        message += f": {rule.reason}"
    return message


@dataclass(frozen=True)
class ConflictOutcome:
    """A triggered rule and what was done about it."""

    owner_id: ManifestId
    other_id: ManifestId
    rule: ConflictRule
    message: str

    @property
    def strategy(self) -> ResolutionStrategy:
        return self.rule.resolution_strategy


@dataclass(frozen=True)
class DroppedContent:
    """Content removed from the set by PreferNewer/PreferExisting."""

    dropped_id: ManifestId
    kept_id: ManifestId
    reason: str


@dataclass
class DecisionRequest:
    """A conflict the caller has to settle by keeping one of two items."""

    first_id: ManifestId
    second_id: ManifestId
    rule: ConflictRule
    message: str
    chosen_id: ManifestId | None = None

    @property
    def options(self) -> tuple[ManifestId, ManifestId]:
        return (self.first_id, self.second_id)

    @property
    def is_answered(self) -> bool:
        return self.chosen_id is not None


@dataclass
class ConflictResolution:
    """State and outcome of one resolution request.

    Outcomes and decision requests only ever name content that is still in
    manifests: dropping an item discards the outcomes that involve it and
    settles its pending decisions in favour of the other side.
    """

    proposed: list[ContentManifest]
    existing_ids: frozenset[ManifestId] = frozenset()
    state: ResolutionState = ResolutionState.Pending
    manifests: list[ContentManifest] = field(default_factory=list)
    blocked: list[ConflictOutcome] = field(default_factory=list)
    warned: list[ConflictOutcome] = field(default_factory=list)
    dropped: list[DroppedContent] = field(default_factory=list)
    merge_candidates: list[ConflictOutcome] = field(default_factory=list)
    decision_requests: list[DecisionRequest] = field(default_factory=list)
    rejected: DecisionRequest | None = None
    rejection_reason: str = ""

    def transition(self, new_state: ResolutionState) -> None:
        """Move to a new state.

        Raises:
            ResolutionStateError: If the transition is not allowed
        """
        if new_state not in _TRANSITIONS.get(self.state, frozenset()):
            raise ResolutionStateError(
                f"Cannot move resolution from {self.state.value} to {new_state.value}",
                context={"from": self.state.value, "to": new_state.value},
            )
        logger.debug("Conflict resolution %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    @property
    def allowed(self) -> bool:
        return self.state in ALLOWED_STATES

    @property
    def warnings(self) -> list[str]:
        return [outcome.rule.resolution_message or outcome.message for outcome in self.warned]

    @property
    def pending_decisions(self) -> list[DecisionRequest]:
        return [r for r in self.decision_requests if not r.is_answered]

    @property
    def decision_request(self) -> DecisionRequest | None:
        """The next unanswered decision request, if any."""
        pending = self.pending_decisions
        return pending[0] if pending else None

    @property
    def errors(self) -> list[str]:
        return [outcome.message for outcome in self.blocked]

    def is_kept(self, manifest_id: ManifestId | str) -> bool:
        return any(m.id == manifest_id for m in self.manifests)

    def drop(self, dropped_id: ManifestId, kept_id: ManifestId, reason: str) -> None:
        """Remove an item from the set along with everything that names it."""
        self.manifests = [m for m in self.manifests if m.id != dropped_id]
        self.dropped.append(DroppedContent(dropped_id, kept_id, reason))
        logger.info("Dropped %s in favour of %s: %s", dropped_id, kept_id, reason)

        def involves(outcome: ConflictOutcome) -> bool:
            return dropped_id in (outcome.owner_id, outcome.other_id)

        self.blocked = [o for o in self.blocked if not involves(o)]
        self.warned = [o for o in self.warned if not involves(o)]
        self.merge_candidates = [o for o in self.merge_candidates if not involves(o)]

        remaining = []
        for request in self.decision_requests:
            if request.is_answered or dropped_id not in request.options:
                remaining.append(request)
                continue
            other = request.second_id if request.first_id == dropped_id else request.first_id
            if self.is_kept(other):
                request.chosen_id = other
                remaining.append(request)
                logger.debug("Decision between %s and %s settled by dropping %s", *request.options, dropped_id)
        self.decision_requests = remaining

    def apply_decision(self, keep_id: ManifestId | str) -> None:
        """Answer the pending decision request that offers keep_id.

        The other side is dropped from the set, which may settle further
        requests. Once every request has an answer the resolution becomes
        Allowed.

        Raises:
            ResolutionStateError: If no decision is pending
            ValueError: If keep_id is not an option of a pending request or
                        is no longer part of the set
        """
        if self.state is not ResolutionState.AwaitingUserChoice:
            raise ResolutionStateError(
                f"No decision pending (state is {self.state.value})",
                context={"state": self.state.value},
            )

        keep = ManifestId.create(keep_id)
        request = next((r for r in self.pending_decisions if keep in r.options), None)
        if request is None:
            raise ValueError(f"{keep} is not an option of any pending decision")
        if not self.is_kept(keep):
            raise ValueError(f"{keep} is no longer part of the activation set")

        request.chosen_id = keep
        other = request.second_id if keep == request.first_id else request.first_id
        self.drop(other, keep, "user choice")

        if not self.pending_decisions:
            self.transition(ResolutionState.Allowed)

    def reject(self, reason: str = "Rejected by user") -> None:
        """Decline a pending decision, blocking the whole set."""
        request = self.decision_request
        self.transition(ResolutionState.Blocked)
        self.rejected = request
        self.rejection_reason = reason

    def raise_for_state(self) -> None:
        """Raise ConflictBlocked if the resolution ended up Blocked."""
        if self.state is not ResolutionState.Blocked:
            return
        if self.blocked:
            outcome = self.blocked[0]
            raise ConflictBlocked(outcome.owner_id, outcome.other_id, outcome.rule.reason)
        if self.rejected is not None:
            raise ConflictBlocked(self.rejected.first_id, self.rejected.second_id, self.rejection_reason)
        raise ConflictBlocked("activation set", "activation set", self.rejection_reason)


class ConflictResolver:
    """Evaluates conflict rules across a proposed activation set.

    Work is O(C^2 * M) for C manifests carrying up to M rules each.
    """

    def resolve(
        self,
        manifests: Iterable[ContentManifest],
        existing_ids: Iterable[ManifestId | str] = (),
    ) -> ConflictResolution:
        """Resolve conflicts in a proposed set.

        Args:
            manifests: Proposed activation set, in priority order
            existing_ids: Ids already installed/active, used by PreferExisting

        Returns:
            ConflictResolution in a terminal state or AwaitingUserChoice

        Raises:
            InvalidFormat: If a rule's version range meets an unparseable version
        """
        proposed = list(manifests)
        resolution = ConflictResolution(
            proposed=proposed,
            existing_ids=frozenset(ManifestId.create(i) for i in existing_ids),
            manifests=list(proposed),
        )
        resolution.transition(ResolutionState.Evaluating)

        for i, first in enumerate(proposed):
            for second in proposed[i + 1:]:
                if not self._is_active(resolution, first) or not self._is_active(resolution, second):
                    continue
                self._evaluate_pair(resolution, first, second)

        resolution.transition(self._final_state(resolution))
        logger.debug(
            "Resolved %d manifests to %s (%d kept)",
            len(proposed),
            resolution.state.value,
            len(resolution.manifests),
        )
        return resolution

    @staticmethod
    def _is_active(resolution: ConflictResolution, manifest: ContentManifest) -> bool:
        return any(m is manifest for m in resolution.manifests)

    def _evaluate_pair(
        self,
        resolution: ConflictResolution,
        first: ContentManifest,
        second: ContentManifest,
    ) -> None:
        owner, other = first, second
        rule = first_triggered_rule(first, second)
        if rule is None:
            owner, other = second, first
            rule = first_triggered_rule(second, first)
        if rule is None:
            return

        outcome = ConflictOutcome(owner.id, other.id, rule, _describe(owner, other, rule))
        strategy = rule.resolution_strategy
        logger.debug("Conflict rule triggered (%s): %s", strategy.value, outcome.message)

        if strategy is ResolutionStrategy.Block:
            resolution.blocked.append(outcome)
        elif strategy is ResolutionStrategy.Warn:
            resolution.warned.append(outcome)
        elif strategy is ResolutionStrategy.PreferNewer:
            keep, drop = self._prefer_newer(owner, other)
            resolution.drop(drop.id, keep.id, f"newer version preferred ({outcome.message})")
        elif strategy is ResolutionStrategy.PreferExisting:
            keep, drop = self._prefer_existing(resolution.existing_ids, owner, other)
            resolution.drop(drop.id, keep.id, f"existing content preferred ({outcome.message})")
        elif strategy is ResolutionStrategy.UserChoice:
            resolution.decision_requests.append(
                DecisionRequest(owner.id, other.id, rule, rule.resolution_message or outcome.message)
            )
        elif strategy is ResolutionStrategy.Merge:
            resolution.merge_candidates.append(outcome)
        else:  # pragma: no cover - exhaustive over ResolutionStrategy
            raise ValueError(f"Unhandled resolution strategy: {strategy}")

    @staticmethod
    def _prefer_newer(
        owner: ContentManifest, other: ContentManifest
    ) -> tuple[ContentManifest, ContentManifest]:
        order = compare_versions(owner.version, other.version, owner.publisher.publisher_type or None)
        # Ties keep the rule owner
        return (owner, other) if order >= 0 else (other, owner)

    @staticmethod
    def _prefer_existing(
        existing_ids: frozenset[ManifestId], owner: ContentManifest, other: ContentManifest
    ) -> tuple[ContentManifest, ContentManifest]:
        owner_existing = owner.id in existing_ids
        other_existing = other.id in existing_ids
        if owner_existing != other_existing:
            return (owner, other) if owner_existing else (other, owner)

        # Neither or both installed: the older version is taken as the existing one
        order = compare_versions(owner.version, other.version, owner.publisher.publisher_type or None)
        return (owner, other) if order <= 0 else (other, owner)

    @staticmethod
    def _final_state(resolution: ConflictResolution) -> ResolutionState:
        if resolution.blocked:
            return ResolutionState.Blocked
        if resolution.pending_decisions:
            return ResolutionState.AwaitingUserChoice
        if resolution.merge_candidates:
            return ResolutionState.FlaggedForMerge
        if resolution.warned:
            return ResolutionState.Warned
        return ResolutionState.Allowed


def resolve_conflicts(
    manifests: Iterable[ContentManifest],
    existing_ids: Iterable[ManifestId | str] = (),
) -> ConflictResolution:
    """Shortcut for ConflictResolver().resolve()."""
    return ConflictResolver().resolve(manifests, existing_ids)
