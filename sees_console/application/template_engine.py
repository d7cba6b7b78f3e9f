"""
===============================================================================
CRC CARD — application/template_engine.py
===============================================================================

Module:
    Template Placeholder Engine (decommission notice pages)

Responsibilities:
    - Publish the placeholder schema in a fixed order.
    - Validate placeholder values (required; extended: type/length/range/URL).
    - Render `{{KEY}}` markers with literal (regex-escaped) substitution.
    - Recover values from an already rendered page (edit flow).
    - Prepare the template for in-console previews.

Collaborators:
    - application.usecases.sees: validates and renders template variables.
    - api.sees_routes: schema, validation and preview endpoints.

Notes:
    - A value equal to its own marker (`{{KEY}}`) counts as empty: a form
      field the user never touched still holds the marker text.
    - Pure functions; the only I/O is load_template().
===============================================================================
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from datetime import date
from pathlib import Path
from typing import Any, Literal, Mapping, Optional

PlaceholderType = Literal["string", "number", "url"]

DEFAULT_URL_PATTERN = r"^https?://.+"
DEFAULT_LINK_TEXT = "こちら"


@dataclass(frozen=True, slots=True)
class PlaceholderDefinition:
    key: str
    label: str
    default_value: str = ""
    required: bool = True
    type: PlaceholderType = "string"
    max_length: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None
    validation: Optional[str] = None
    auto: bool = False
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    errors: list[str]


def marker(key: str) -> str:
    return "{{" + key + "}}"


def is_empty_value(key: str, value: Any) -> bool:
    """None, "" and the key's own marker are all "not provided"."""
    if value is None:
        return True
    text = value if isinstance(value, str) else str(value)
    return text == "" or text == marker(key)


def _format_date(day: date) -> str:
    # R: YYYY/M/D, no zero padding (the format staff type by hand).
    return f"{day.year}/{day.month}/{day.day}"


# =============================================================================
# Schema
# =============================================================================


def list_placeholders(today: Optional[date] = None) -> list[PlaceholderDefinition]:
    """Placeholder schema in display order. Date defaults use `today`."""
    day = today or date.today()
    return [
        PlaceholderDefinition(
            key="REDIRECT_URL",
            label="Redirect URL",
            type="url",
            max_length=2048,
            description="Destination visitors are sent to",
        ),
        PlaceholderDefinition(
            key="SERVICE_NAME", label="Service name", max_length=100
        ),
        PlaceholderDefinition(
            key="SERVICE_CATEGORY", label="Service category", max_length=100
        ),
        PlaceholderDefinition(
            key="SERVICE_TITLE", label="Service title", max_length=200
        ),
        PlaceholderDefinition(key="END_DATE", label="End date", max_length=50),
        PlaceholderDefinition(
            key="LAST_UPDATED_DATE",
            label="Last updated date",
            default_value=_format_date(day),
            max_length=50,
        ),
        PlaceholderDefinition(
            key="REDIRECT_LINK_TEXT",
            label="Redirect link text",
            default_value=DEFAULT_LINK_TEXT,
            max_length=100,
        ),
        PlaceholderDefinition(
            key="CURRENT_YEAR",
            label="Current year",
            default_value=str(day.year),
            type="number",
            min=2000,
            max=2100,
            auto=True,
        ),
        PlaceholderDefinition(
            key="META_KEYWORDS",
            label="Meta keywords",
            required=False,
            max_length=500,
        ),
        PlaceholderDefinition(
            key="META_DESCRIPTION",
            label="Meta description",
            required=False,
            max_length=500,
        ),
        PlaceholderDefinition(
            key="REDIRECT_SECONDS",
            label="Redirect delay (seconds)",
            default_value="5",
            required=False,
            type="number",
            min=0,
            max=60,
        ),
    ]


def default_values(today: Optional[date] = None) -> dict[str, str]:
    """Initial form values; auto fields are computed."""
    day = today or date.today()
    values: dict[str, str] = {}
    for definition in list_placeholders(day):
        if definition.auto and definition.key == "CURRENT_YEAR":
            values[definition.key] = str(day.year)
        else:
            values[definition.key] = definition.default_value
    return values


def sample_values(today: Optional[date] = None) -> dict[str, Any]:
    """Realistic values for previews and demos."""
    day = today or date.today()
    return {
        "SERVICE_NAME": "東京都サンプルサービス",
        "SERVICE_CATEGORY": "東京都",
        "SERVICE_TITLE": "サンプルサービス",
        "META_KEYWORDS": "東京都, サンプル, サービス終了",
        "META_DESCRIPTION": "このサービスは終了しました",
        "END_DATE": "令和6年12月31日（火曜日）",
        "LAST_UPDATED_DATE": "令和7年1月1日",
        "REDIRECT_URL": "https://www.metro.tokyo.lg.jp/",
        "REDIRECT_LINK_TEXT": "東京都ホームページ",
        "REDIRECT_SECONDS": 5,
        "CURRENT_YEAR": day.year,
    }


# =============================================================================
# Validation
# =============================================================================


def validate(
    values: Mapping[str, Any], schema: Optional[list[PlaceholderDefinition]] = None
) -> ValidationResult:
    """Required-field check over the whole schema; every error is collected."""
    errors: list[str] = []
    for definition in schema or list_placeholders():
        if definition.required and is_empty_value(
            definition.key, values.get(definition.key)
        ):
            errors.append(f"{definition.label} is required")
    return ValidationResult(valid=not errors, errors=errors)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _check_field(
    definition: PlaceholderDefinition, value: Any, url_pattern: str
) -> Optional[str]:
    """First failing rule for one non-empty value, or None."""
    label = definition.label

    if definition.type == "number":
        number = _as_number(value)
        if number is None:
            return f"{label} must be a number"
        if definition.min is not None and number < definition.min:
            return f"{label} must be at least {definition.min:g}"
        if definition.max is not None and number > definition.max:
            return f"{label} must be at most {definition.max:g}"
        return None

    if not isinstance(value, str):
        return f"{label} must be a string"

    if definition.max_length is not None and len(value) > definition.max_length:
        return f"{label} must be at most {definition.max_length} characters"

    if definition.type == "url":
        pattern = definition.validation or url_pattern
        if not re.search(pattern, value):
            return f"{label} must be a valid URL"

    return None


def validate_extended(
    values: Mapping[str, Any],
    schema: Optional[list[PlaceholderDefinition]] = None,
    *,
    url_pattern: str = DEFAULT_URL_PATTERN,
) -> ValidationResult:
    """
    Required check plus type, maxLength, min/max and URL rules.

    Each field reports at most one error; all fields are checked.
    """
    errors: list[str] = []
    for definition in schema or list_placeholders():
        value = values.get(definition.key)
        if is_empty_value(definition.key, value):
            if definition.required:
                errors.append(f"{definition.label} is required")
            continue

        error = _check_field(definition, value, url_pattern)
        if error:
            errors.append(error)

    return ValidationResult(valid=not errors, errors=errors)


# =============================================================================
# Rendering
# =============================================================================


def render(template: str, values: Mapping[str, Any]) -> str:
    """
    Replace `{{KEY}}` with the value for every non-empty, non-marker value.

    Keys are matched literally; unresolved markers stay in the output.
    """
    rendered = template
    for key, value in values.items():
        if is_empty_value(key, value):
            continue
        text = value if isinstance(value, str) else str(value)
        # R: callable replacement so backslashes in values are not expanded.
        rendered = re.sub(re.escape(marker(key)), lambda _m, t=text: t, rendered)
    return rendered


_TITLE_RE = re.compile(r"<title>(.*?)</title>", re.DOTALL)
_KEYWORDS_RE = re.compile(r'<meta name="keywords" content="(.*?)"')
_DESCRIPTION_RE = re.compile(r'<meta name="description" content="(.*?)"')
_REDIRECT_RE = re.compile(r"window\.location\.href = '(.*?)'")
_SECONDS_RE = re.compile(r"setTimeout\(function\(\) \{[^}]*\}, (\d+)\*1000\)")


def extract_placeholders(html: str) -> dict[str, Any]:
    """Recover values from a rendered notice page (only what matches)."""
    found: dict[str, Any] = {}

    if match := _TITLE_RE.search(html):
        found["SERVICE_NAME"] = match.group(1)
    if match := _KEYWORDS_RE.search(html):
        found["META_KEYWORDS"] = match.group(1)
    if match := _DESCRIPTION_RE.search(html):
        found["META_DESCRIPTION"] = match.group(1)
    if match := _REDIRECT_RE.search(html):
        found["REDIRECT_URL"] = match.group(1)
    if match := _SECONDS_RE.search(html):
        found["REDIRECT_SECONDS"] = int(match.group(1))

    return found


# =============================================================================
# Template I/O and preview
# =============================================================================

# R: a <script> block that contains setTimeout, without spanning other blocks.
_REDIRECT_SCRIPT_RE = re.compile(
    r"<script>(?:(?!</script>).)*?setTimeout.*?</script>", re.DOTALL
)


def load_template(path: str | Path) -> str:
    return Path(path).read_text(encoding="utf-8")


def prepare_preview(html: str, base_url: str) -> str:
    """
    Make a template previewable inside the console:
    - relative css/ and images/ references point at `{base_url}/templates/`
    - the auto-redirect script is removed
    """
    base = base_url.rstrip("/")
    prepared = (
        html.replace('href="css/', f'href="{base}/templates/css/')
        .replace('src="images/', f'src="{base}/templates/images/')
        .replace('href="images/', f'href="{base}/templates/images/')
    )
    return _REDIRECT_SCRIPT_RE.sub("", prepared)
