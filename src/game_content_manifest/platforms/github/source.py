"""GitHub release source.

Describes releases of community projects hosted on GitHub. The source works
on release records handed to it (e.g. parsed from the releases API by the
caller); it does not talk to the network itself.
"""

from dataclasses import dataclass, field
from typing import Any

from ...core.types import ContentType, GameType
from ...models import PublisherInfo
from ...sources.base import ContentData, ContentSource, SourceContent

GITHUB_URL = "https://github.com"


@dataclass(frozen=True)
class GitHubRelease:
    """One tagged release of a repository."""

    owner: str
    repository: str
    tag: str
    name: str = ""
    body: str = ""
    published_at: str = ""
    content_type: ContentType = ContentType.Mod
    target_game: GameType = GameType.ZeroHour
    assets: tuple[dict[str, Any], ...] = field(default=())

    @property
    def uid(self) -> str:
        return f"{self.owner}/{self.repository}@{self.tag}"

    @property
    def title(self) -> str:
        return self.name or f"{self.repository} {self.tag}"

    @property
    def repository_url(self) -> str:
        return f"{GITHUB_URL}/{self.owner}/{self.repository}"


class GitHubReleaseSource(ContentSource):
    """Content source over a list of GitHub releases.

    Example:
        >>> source = GitHubReleaseSource([GitHubRelease("TheSuperHackers", "GeneralsGameCode", "weekly-2025-01-14")])
        >>> [c.uid for c in source.list_content()]
        ['TheSuperHackers/GeneralsGameCode@weekly-2025-01-14']
    """

    publisher_type = "github"

    def __init__(self, releases: list[GitHubRelease] | None = None):
        self.releases = list(releases or [])

    def list_content(self) -> list[SourceContent]:
        return list(self.releases)

    def get_content(self, uid: str) -> SourceContent:
        for release in self.releases:
            if release.uid.lower() == uid.lower():
                return release
        raise KeyError(f"Release not found: {uid}")

    def get_content_data(self, content: SourceContent) -> ContentData:
        """Collect the release's metadata and asset files.

        Raises:
            ValueError: If content is not a GitHubRelease
        """
        if not isinstance(content, GitHubRelease):
            raise ValueError(f"Expected GitHubRelease, got {type(content).__name__}")

        return ContentData(
            content=content,
            publisher=self.publisher_info(content),
            metadata={
                "release": content,
                "published_at": content.published_at,
                "description": content.body,
            },
            files=[
                {
                    "relative_path": asset["name"],
                    "size": int(asset.get("size", 0)),
                    "hash": asset.get("sha256", ""),
                }
                for asset in content.assets
            ],
        )

    def publisher_info(self, content: SourceContent | None = None) -> PublisherInfo:
        if not isinstance(content, GitHubRelease):
            return PublisherInfo(name="GitHub", publisher_type=self.publisher_type, website=GITHUB_URL)
        return PublisherInfo(
            name=content.owner,
            publisher_type=self.publisher_type,
            website=f"{GITHUB_URL}/{content.owner}",
            support_url=f"{content.repository_url}/issues",
        )

    def get_transformer(self):
        from .transformer import GitHubReleaseTransformer

        return GitHubReleaseTransformer()
