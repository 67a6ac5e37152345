"""Blog posts stored as markdown files with a YAML front matter block."""

import logging
import re
from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .exceptions import PostNotFoundError

logger = logging.getLogger(__name__)

_FRONT_MATTER = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.S)


@dataclass
class PostSummary:
    slug: str
    title: str
    date: Optional[str] = None
    summary: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class PostPayload(PostSummary):
    content: str = ""

    def summary_only(self) -> PostSummary:
        return PostSummary(slug=self.slug, title=self.title, date=self.date, summary=self.summary)


def split_front_matter(raw: str) -> Tuple[Dict[str, Any], str]:
    match = _FRONT_MATTER.match(raw)
    if not match:
        return {}, raw
    data = yaml.safe_load(match.group(1)) or {}
    if not isinstance(data, dict):
        data = {}
    return data, raw[match.end():]


def _iso_date(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time.min)
    else:
        try:
            moment = datetime.fromisoformat(str(value))
        except ValueError:
            logger.warning("Ignoring unparsable post date %r", value)
            return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat()


def parse_post(slug: str, raw: str) -> PostPayload:
    meta, content = split_front_matter(raw)
    title = meta.get("title") or slug.replace("-", " ").title()
    return PostPayload(
        slug=slug,
        title=str(title),
        date=_iso_date(meta.get("date")),
        summary=meta.get("summary") or None,
        content=content,
    )


class PostLoader:
    """Read posts from a local directory of ``<slug>.md`` files."""

    def __init__(self, posts_dir: str | Path) -> None:
        self.posts_dir = Path(posts_dir)

    def _load_all(self) -> List[PostPayload]:
        if not self.posts_dir.is_dir():
            logger.warning("Posts directory %s not found", self.posts_dir)
            return []
        posts = []
        for path in sorted(self.posts_dir.glob("*.md")):
            posts.append(parse_post(path.stem, path.read_text(encoding="utf-8")))
        return posts

    def list_posts(self) -> List[PostSummary]:
        """Return post summaries, newest first; undated posts go last."""
        summaries = [p.summary_only() for p in self._load_all()]
        dated = sorted((s for s in summaries if s.date), key=lambda s: s.date, reverse=True)
        return dated + [s for s in summaries if not s.date]

    def get_post(self, slug: str) -> PostPayload:
        if not slug or "/" in slug or "\\" in slug or slug.startswith("."):
            raise PostNotFoundError("Post not found")
        path = self.posts_dir / f"{slug}.md"
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PostNotFoundError("Post not found") from exc
        return parse_post(slug, raw)
