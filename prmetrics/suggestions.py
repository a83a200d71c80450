"""
Context-aware autocomplete for the query editor.

Suggestions come from three sources: canned search templates, generic
qualifier syntax, and values for the qualifier under the cursor (users,
repositories, labels). Remote value lookups are best-effort: a failed lookup
is logged and degrades to a partial or empty list.
"""

import re
from collections.abc import Awaitable, Callable
from datetime import date, timedelta

from prmetrics.client import AsyncGitHubClient
from prmetrics.exceptions import PRMetricsError, SuggestionLookupFailure
from prmetrics.logging import get_logger
from prmetrics.types.suggestions import AutocompleteSuggestion

MAX_SUGGESTIONS = 10
USER_LOOKUP_LIMIT = 10
REPOSITORY_LOOKUP_LIMIT = 20
RECENT_ACTIVITY_DAYS = 7

SYNTAX_SUGGESTIONS = [
    AutocompleteSuggestion("syntax", "author:", "author:username", "Filter by pull request author", "Filters", "author:"),
    AutocompleteSuggestion("syntax", "reviewed-by:", "reviewed-by:username", "Filter by reviewer", "Filters", "reviewed-by:"),
    AutocompleteSuggestion("syntax", "repo:", "repo:owner/name", "Filter by repository", "Filters", "repo:"),
    AutocompleteSuggestion("syntax", "label:", 'label:"name"', "Filter by label", "Filters", 'label:"'),
    AutocompleteSuggestion("syntax", "is:open", "is:open", "Show only open pull requests", "Status", "is:open"),
    AutocompleteSuggestion("syntax", "is:closed", "is:closed", "Show only closed pull requests", "Status", "is:closed"),
    AutocompleteSuggestion("syntax", "is:merged", "is:merged", "Show only merged pull requests", "Status", "is:merged"),
    AutocompleteSuggestion("syntax", "is:draft", "is:draft", "Show only draft pull requests", "Status", "is:draft"),
    AutocompleteSuggestion("syntax", "created:", "created:>YYYY-MM-DD", "Filter by creation date", "Dates", "created:>"),
    AutocompleteSuggestion("syntax", "updated:", "updated:<YYYY-MM-DD", "Filter by last update date", "Dates", "updated:<"),
]

COMMON_LABELS = [
    "bug",
    "enhancement",
    "documentation",
    "good first issue",
    "help wanted",
    "question",
    "wontfix",
    "duplicate",
]

ME_SUGGESTION = AutocompleteSuggestion(
    "user", "@me", "@me", "Current authenticated user", "Users", "@me"
)

# (pattern, value context type); first match wins
_VALUE_CONTEXTS = [
    (re.compile(r"author:(\S*)$"), "user"),
    (re.compile(r"reviewed-by:(\S*)$"), "user"),
    (re.compile(r"repo:(\S*)$"), "repository"),
    (re.compile(r'label:"([^"]*)$'), "label"),
]

_CURRENT_WORD_RE = re.compile(r"(\S+)$")
_AFTER_OPERATOR_RE = re.compile(r"(^|\s)(AND|OR|NOT)\s*$", re.IGNORECASE)
_VALUE_TYPING_RE = re.compile(r'^(author:|reviewed-by:|repo:|label:")', re.IGNORECASE)

logger = get_logger("suggestions")


def templates(today: date) -> list[AutocompleteSuggestion]:
    """Canned searches; "Recent Activity" looks back RECENT_ACTIVITY_DAYS from ``today``."""
    since = (today - timedelta(days=RECENT_ACTIVITY_DAYS)).isoformat()
    return [
        AutocompleteSuggestion(
            "template", "my-prs", "My Pull Requests",
            "Pull requests I authored or reviewed", "Templates",
            "is:pr author:@me OR reviewed-by:@me",
        ),
        AutocompleteSuggestion(
            "template", "team-review", "Pending Team Reviews",
            "Open PRs waiting for review", "Templates",
            "is:pr is:open review:required",
        ),
        AutocompleteSuggestion(
            "template", "recent-activity", "Recent Activity",
            f"PRs updated in last {RECENT_ACTIVITY_DAYS} days", "Templates",
            f"is:pr updated:>{since} involves:@me",
        ),
        AutocompleteSuggestion(
            "template", "bugs", "Bug Fixes",
            "PRs labeled as bug fixes", "Templates",
            'is:pr label:"bug" is:open',
        ),
    ]


def current_word(before_cursor: str) -> str:
    """The trailing run of non-space characters."""
    match = _CURRENT_WORD_RE.search(before_cursor)
    return match.group(1) if match else ""


def value_context(before_cursor: str) -> tuple[str, str] | None:
    """
    Detect a qualifier that is waiting for a value.

    Returns:
        (context type, partial value) or None
    """
    for pattern, kind in _VALUE_CONTEXTS:
        match = pattern.search(before_cursor)
        if match:
            return kind, match.group(1)
    return None


def should_show_syntax(before_cursor: str, word: str) -> bool:
    """Whether generic qualifier syntax is relevant at the cursor."""
    if (
        before_cursor.endswith(" ")
        or not before_cursor.strip()
        or _AFTER_OPERATOR_RE.search(before_cursor)
        or not word
    ):
        return True

    lowered = word.lower()
    typing_value = _VALUE_TYPING_RE.match(lowered) and not any(
        lowered == suggestion.value.lower() for suggestion in SYNTAX_SUGGESTIONS
    )
    if typing_value:
        return False

    return any(suggestion.value.lower().startswith(lowered) for suggestion in SYNTAX_SUGGESTIONS)


def filter_suggestions(
    suggestions: list[AutocompleteSuggestion],
    text: str,
    match_insert_text: bool = False,
) -> list[AutocompleteSuggestion]:
    """Keep suggestions whose value or display contains ``text`` (case-insensitive)."""
    if not text:
        return suggestions

    lowered = text.lower()
    matched = []
    for suggestion in suggestions:
        fields = [suggestion.value, suggestion.display]
        if match_insert_text and suggestion.insert_text:
            fields.append(suggestion.insert_text)
        if any(lowered in field.lower() for field in fields):
            matched.append(suggestion)
    return matched


def label_suggestions(partial: str) -> list[AutocompleteSuggestion]:
    lowered = partial.lower()
    return [
        AutocompleteSuggestion("label", label, label, None, "Labels", f'{label}"')
        for label in COMMON_LABELS
        if lowered in label
    ]


class SuggestionEngine:
    """
    Produces at most MAX_SUGGESTIONS ranked suggestions per keystroke.

    One GitHub client is created per credential and reused until
    :meth:`aclose`.

    Example:
        ```python
        engine = SuggestionEngine()
        suggestions = await engine.get_suggestions("author:oct", 10, token)
        await engine.aclose()
        ```
    """

    def __init__(
        self,
        client_factory: Callable[[str], AsyncGitHubClient] | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        """
        Initialize the engine.

        Args:
            client_factory: Builds a client for a credential (default:
                AsyncGitHubClient(token=credential))
            today: Returns the current date (injectable for tests)
        """
        self._client_factory = client_factory or _default_client_factory
        self._today = today
        self._clients: dict[str, AsyncGitHubClient] = {}

    async def get_suggestions(
        self,
        query: str,
        cursor_position: int,
        credential: str,
    ) -> list[AutocompleteSuggestion]:
        """
        Suggestions for the cursor position in ``query``.

        Templates come first (only for an empty or bare "is:pr" query), then
        values for the qualifier being typed, then generic syntax.

        Args:
            query: Full editor contents
            cursor_position: Cursor offset into ``query``
            credential: Token used for remote value lookups

        Returns:
            Up to MAX_SUGGESTIONS suggestions; never raises for lookup errors
        """
        before_cursor = query[:cursor_position]
        word = current_word(before_cursor)
        suggestions: list[AutocompleteSuggestion] = []

        if query.strip() in ("", "is:pr"):
            suggestions.extend(filter_suggestions(templates(self._today()), word, match_insert_text=True))

        context = value_context(before_cursor)
        if context is not None:
            kind, partial = context
            # Values are already narrowed by the partial; filtering on the
            # current word would compare against "author:..." and drop them.
            suggestions.extend(await self._value_suggestions(kind, partial, credential))

        if should_show_syntax(before_cursor, word):
            suggestions.extend(filter_suggestions(SYNTAX_SUGGESTIONS, word))

        return suggestions[:MAX_SUGGESTIONS]

    async def aclose(self) -> None:
        """Close every memoized client."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.close()

    def _client(self, credential: str) -> AsyncGitHubClient:
        client = self._clients.get(credential)
        if client is None:
            client = self._client_factory(credential)
            self._clients[credential] = client
        return client

    async def _value_suggestions(
        self,
        kind: str,
        partial: str,
        credential: str,
    ) -> list[AutocompleteSuggestion]:
        if kind == "user":
            return await _best_effort(
                self._user_suggestions(partial, credential), [ME_SUGGESTION], "user"
            )
        if kind == "repository":
            return await _best_effort(
                self._repository_suggestions(partial, credential), [], "repository"
            )
        if kind == "label":
            return label_suggestions(partial)
        return []

    async def _user_suggestions(self, partial: str, credential: str) -> list[AutocompleteSuggestion]:
        suggestions = [ME_SUGGESTION]
        if not partial:
            return suggestions

        try:
            users = await self._client(credential).search.users(
                f"{partial} in:login", per_page=USER_LOOKUP_LIMIT
            )
            suggestions.extend(
                AutocompleteSuggestion(
                    "user", user["login"], user["login"], user.get("name"), "Users", user["login"]
                )
                for user in users
            )
        except (PRMetricsError, AttributeError, KeyError, TypeError) as e:
            raise SuggestionLookupFailure(f"User search failed: {e}") from e
        return suggestions

    async def _repository_suggestions(
        self,
        partial: str,
        credential: str,
    ) -> list[AutocompleteSuggestion]:
        try:
            repos = await self._client(credential).repos.list_for_authenticated_user(
                per_page=REPOSITORY_LOOKUP_LIMIT, sort="updated", direction="desc"
            )
            lowered = partial.lower()
            return [
                AutocompleteSuggestion(
                    "repository",
                    repo["full_name"],
                    repo["full_name"],
                    repo.get("description"),
                    "Repositories",
                    repo["full_name"],
                )
                for repo in repos
                if lowered in repo["full_name"].lower()
            ]
        except (PRMetricsError, AttributeError, KeyError, TypeError) as e:
            raise SuggestionLookupFailure(f"Repository listing failed: {e}") from e


async def _best_effort(
    lookup: Awaitable[list[AutocompleteSuggestion]],
    fallback: list[AutocompleteSuggestion],
    kind: str,
) -> list[AutocompleteSuggestion]:
    try:
        return await lookup
    except SuggestionLookupFailure as e:
        logger.warning(f"Falling back for {kind} suggestions: {e.message}")
        return fallback


def _default_client_factory(credential: str) -> AsyncGitHubClient:
    return AsyncGitHubClient(token=credential)
