"""
Validation and sanitization of GitHub search queries.

Checks run in a fixed order: empty check, ``is:pr`` insertion, length limit,
angle-bracket stripping, then syntax and qualifier checks on the sanitized
string. Note that stripping ``<``/``>`` also rewrites date operators such as
``created:>2024-01-01`` into ``created:2024-01-01``.
"""

import re

from prmetrics.exceptions import ValidationError
from prmetrics.query.tokenizer import Token, TokenKind, tokenize
from prmetrics.types.query import QueryValidationResult

MAX_QUERY_LENGTH = 256

# Qualifiers accepted by GitHub issue and pull request search
SUPPORTED_QUALIFIERS = frozenset({
    # Basic
    "is", "type", "in", "repo", "user", "org", "language",
    # People
    "author", "assignee", "mentions", "commenter", "involves", "team",
    # Reviews
    "reviewed-by", "review-requested", "user-review-requested",
    "team-review-requested", "review",
    # State and status
    "state", "reason", "status", "draft", "archived", "locked",
    # Content
    "label", "milestone", "project", "linked", "no",
    # Dates
    "created", "updated", "closed", "merged",
    # Commits
    "head", "base", "sha",
    # Counts
    "comments", "interactions", "reactions", "size",
    # Visibility
    "public", "private",
})

_REPEATED_OPERATORS = ("&&", "||", "!!")

_IS_VALUES = [
    "pr", "issue", "open", "closed", "merged", "unmerged", "draft",
    "public", "private", "locked", "unlocked", "queued",
]
_STATE_VALUES = ["open", "closed", "merged", "all"]
_REVIEW_VALUES = ["none", "required", "approved", "changes_requested"]
_STATUS_VALUES = ["pending", "success", "failure", "error"]
_REASON_VALUES = ["completed", "not planned"]
_NO_VALUES = ["label", "milestone", "assignee", "project"]

_DATE_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2}|[<>=]+\d{4}-\d{2}-\d{2}|\d{4}-\d{2}-\d{2}\.\.\d{4}-\d{2}-\d{2})$"
)
_NUMBER_RE = re.compile(r"^(\d+|[<>=]+\d+|\d+\.\.\d+)$")
_USER_RE = re.compile(r"^(@me|\*|[\w-]+|app/[\w-]+)$")
_TEAM_RE = re.compile(r"^[\w-]+/[\w-]+$")
_REPO_RE = re.compile(r"^[\w.-]+/[\w.-]+$")
_BRANCH_RE = re.compile(r"^([\w-]+:)?[\w.-]+$")
_SHA_RE = re.compile(r"^[a-f0-9]{7,40}$", re.IGNORECASE)

_USER_QUALIFIERS = {
    "author", "assignee", "mentions", "commenter", "involves",
    "reviewed-by", "review-requested", "user-review-requested",
}


def validate_query(query: str) -> QueryValidationResult:
    """
    Validate and sanitize a search query.

    Args:
        query: Raw query as typed by the user

    Returns:
        QueryValidationResult; ``is_valid`` is True exactly when there are
        no errors
    """
    errors: list[str] = []
    warnings: list[str] = []
    sanitized = query.strip()

    if not sanitized:
        errors.append("Query cannot be empty")
        return QueryValidationResult(is_valid=False, sanitized="", errors=errors, warnings=warnings)

    if "is:pr" not in sanitized:
        sanitized = f"is:pr {sanitized}"
        warnings.append('Added "is:pr" qualifier')

    if len(sanitized) > MAX_QUERY_LENGTH:
        errors.append(f"Query too long (max {MAX_QUERY_LENGTH} characters)")

    sanitized = sanitized.replace("<", "").replace(">", "")

    errors.extend(_check_syntax(sanitized))

    tokens = tokenize(sanitized)
    errors.extend(_check_operator_case(tokens))
    errors.extend(_check_qualifiers(tokens))

    return QueryValidationResult(
        is_valid=not errors,
        sanitized=sanitized,
        errors=errors,
        warnings=warnings,
    )


def validate_realtime(query: str) -> QueryValidationResult:
    """
    Lenient validation for live editing.

    An empty query produces a warning instead of an error, so the editor is
    not flagged while the user is still typing.
    """
    if not query.strip():
        return QueryValidationResult(
            is_valid=False,
            sanitized="",
            errors=[],
            warnings=["Query is empty"],
        )
    return validate_query(query)


def validate_and_sanitize(query: str) -> str:
    """
    Validate a query and return its sanitized form.

    Raises:
        ValidationError: If the query has any errors
    """
    result = validate_query(query)
    if not result.is_valid:
        raise ValidationError(f"Invalid query: {', '.join(result.errors)}", result.errors)
    return result.sanitized


def suggest_query_fixes(query: str) -> list[str]:
    """Return quick-fix rewrites of a query, excluding the query itself."""
    fixes: list[str] = []

    if "is:pr" not in query:
        fixes.append(f"is:pr {query}")

    if "author:" in query and "@me" not in query:
        fixes.append(re.sub(r"author:\w+", "author:@me", query, count=1))

    return [fix for fix in fixes if fix.strip() != query.strip()]


def _check_syntax(query: str) -> list[str]:
    errors: list[str] = []

    if query.count('"') % 2 != 0:
        errors.append("Unmatched quote in query")

    if not _parentheses_balanced(query):
        errors.append("Unmatched parentheses in query")

    for operator in _REPEATED_OPERATORS:
        if operator in query:
            errors.append(f'Repeated operator "{operator}" in query')

    return errors


def _parentheses_balanced(query: str) -> bool:
    depth = 0
    for char in query:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def _check_operator_case(tokens: list[Token]) -> list[str]:
    for token in tokens:
        if token.kind is TokenKind.TERM and token.text.lower() == "or" and token.text != "OR":
            return ["OR operator should be uppercase"]
    return []


def _check_qualifiers(tokens: list[Token]) -> list[str]:
    errors: list[str] = []
    for token in tokens:
        if not token.is_qualifier or token.key is None:
            continue
        if token.key not in SUPPORTED_QUALIFIERS:
            errors.append(f"Unsupported search qualifier: {token.key}")
            continue
        if token.value:
            error = _check_value(token.key, token.value)
            if error:
                errors.append(error)
    return errors


def _check_value(key: str, value: str) -> str | None:
    lowered = value.lower()

    if key in ("is", "type"):
        if lowered not in _IS_VALUES:
            return f'Invalid value "{value}" for {key}. Valid values: {", ".join(_IS_VALUES)}'
    elif key == "state":
        if lowered not in _STATE_VALUES:
            return f'Invalid state "{value}". Valid states: {", ".join(_STATE_VALUES)}'
    elif key == "review":
        if lowered not in _REVIEW_VALUES:
            return f'Invalid review state "{value}". Valid states: {", ".join(_REVIEW_VALUES)}'
    elif key == "draft":
        if lowered not in ("true", "false"):
            return f'Invalid draft value "{value}". Use "true" or "false"'
    elif key in ("archived", "locked"):
        if lowered not in ("true", "false"):
            return f'Invalid {key} value "{value}". Use "true" or "false"'
    elif key in ("created", "updated", "closed", "merged"):
        if not _DATE_RE.match(value):
            return (
                f"Invalid date format for {key}. Use YYYY-MM-DD, >YYYY-MM-DD, "
                "<YYYY-MM-DD, or YYYY-MM-DD..YYYY-MM-DD"
            )
    elif key in ("comments", "interactions", "reactions", "size"):
        if not _NUMBER_RE.match(value):
            return f"Invalid numeric format for {key}. Use number, >number, <number, or number..number"
    elif key in _USER_QUALIFIERS:
        if not _USER_RE.match(value):
            return f"Invalid user format for {key}. Use @me, username, or app/username"
    elif key in ("team-review-requested", "team"):
        if not _TEAM_RE.match(value):
            return f"Invalid team format for {key}. Use org/team format"
    elif key == "repo":
        if not _REPO_RE.match(value):
            return "Invalid repository format. Use owner/repository format"
    elif key in ("head", "base"):
        if not _BRANCH_RE.match(value):
            return f"Invalid branch format for {key}. Use branch or user:branch format"
    elif key == "sha":
        if not _SHA_RE.match(value):
            return "Invalid SHA format. Use at least 7 hexadecimal characters"
    elif key == "status":
        if lowered not in _STATUS_VALUES:
            return f'Invalid status "{value}". Valid statuses: {", ".join(_STATUS_VALUES)}'
    elif key == "reason":
        if lowered not in _REASON_VALUES and lowered.replace("_", " ") not in _REASON_VALUES:
            return f'Invalid reason "{value}". Valid reasons: {", ".join(_REASON_VALUES)}'
    elif key == "no":
        if lowered not in _NO_VALUES:
            return f'Invalid "no" qualifier value "{value}". Valid values: {", ".join(_NO_VALUES)}'

    return None
