"""Utilities for matching, merging and validating hierarchical topics.

Subscription patterns use the broker wildcard vocabulary:
    '*' matches exactly one topic level (e.g., 'orders/*/created')
    '>' as the last level matches one or more trailing levels (e.g., 'orders/>')

Templates come from the feed registry and describe a taxonomy with literal
levels and '{name}' placeholders, e.g. 'orders/{region}/created'. The
sentinel '{any...}' stands for the unconstrained rest of a topic.
"""

from collections.abc import Iterable

TOPIC_SEPARATOR = "/"
SINGLE_LEVEL_WILDCARD = "*"
MULTI_LEVEL_WILDCARD = ">"
ANY_PLACEHOLDER = "{any}"
ANY_REMAINING_PLACEHOLDER = "{any...}"

MQTT_SINGLE_LEVEL_WILDCARD = "+"
MQTT_MULTI_LEVEL_WILDCARD = "#"

_PLACEHOLDER_START = "{"
_PLACEHOLDER_END = "}"


def split_topic(topic: str) -> list[str]:
    """Split a topic, pattern or template into its levels."""
    return topic.split(TOPIC_SEPARATOR)


def is_placeholder(segment: str) -> bool:
    """Return True for a bare placeholder segment such as '{district}'."""
    return segment.startswith(_PLACEHOLDER_START) and segment.endswith(_PLACEHOLDER_END)


def _segment_at(segments: list[str], index: int) -> str | None:
    # Empty levels count as absent, the same as levels past the end.
    if index < len(segments) and segments[index]:
        return segments[index]
    return None


def _strip_wildcards(segment: str) -> str:
    return segment.replace(SINGLE_LEVEL_WILDCARD, "")


def _matches(pattern: str, pattern_parts: list[str], template: str) -> bool:
    template_parts = split_topic(template)

    # A longer template can only be reached through an open-ended pattern
    if len(template_parts) > len(pattern_parts) and not pattern.endswith(MULTI_LEVEL_WILDCARD):
        return False

    for i, pattern_part in enumerate(pattern_parts):
        template_part = _segment_at(template_parts, i)
        if template_part is None:
            return False

        if pattern_part in (SINGLE_LEVEL_WILDCARD, MULTI_LEVEL_WILDCARD):
            continue

        if template_part.startswith(_PLACEHOLDER_START):
            continue

        if pattern_part != template_part:
            return False

    return True


def match_template(pattern: str, templates: Iterable[str]) -> list[str]:
    """Find every registered template a subscription pattern could target.

    Args:
        pattern: Subscription pattern, e.g. 'demographics/>'
        templates: Registry templates, in registry order

    Returns:
        Structurally compatible templates, in registry order. More than one
        entry means the taxonomy is ambiguous for this pattern.

    Examples:
        match_template('orders/*/created', ['orders/{region}/created']) -> ['orders/{region}/created']
        match_template('orders/>', ['orders']) -> []
    """
    pattern_parts = split_topic(pattern)
    return [template for template in templates if _matches(pattern, pattern_parts, template)]


def merge_empty_template(pattern: str) -> str:
    """Synthesize a readable template for a pattern no registered template matches.

    '>' becomes '{any...}', a level containing '*' keeps its literal prefix
    followed by '{any}', every other level is copied verbatim.

    Example:
        merge_empty_template('orders/US*/>') -> 'orders/US{any}/{any...}'
    """
    adhoc_template = []

    for part in split_topic(pattern):
        if part == MULTI_LEVEL_WILDCARD:
            adhoc_template.append(ANY_REMAINING_PLACEHOLDER)
        elif SINGLE_LEVEL_WILDCARD in part:
            adhoc_template.append(f"{_strip_wildcards(part)}{ANY_PLACEHOLDER}")
        else:
            adhoc_template.append(part)

    return TOPIC_SEPARATOR.join(adhoc_template)


def merge_topic_template(pattern: str, template: str) -> str:
    """Combine a subscription pattern with one matched template for display.

    Walks the template levels:
    - a '>' in the pattern expands to the rest of the template
    - an absent or '*' pattern level shows the template level
    - a concrete pattern level over a placeholder keeps the literal prefix
      in front of the placeholder ('US*' + '{region}' -> 'US{region}')
    - otherwise the pattern's own literal wins

    Args:
        pattern: Subscription pattern the template was matched against
        template: One template returned by match_template

    Returns:
        The resolved taxonomy string
    """
    resolved: list[str] = []
    pattern_parts = split_topic(pattern)
    template_parts = split_topic(template)

    for i, template_part in enumerate(template_parts):
        pattern_part = _segment_at(pattern_parts, i)

        if pattern_part == MULTI_LEVEL_WILDCARD:
            resolved.extend(template_parts[i:])
            break
        if pattern_part is None or pattern_part == SINGLE_LEVEL_WILDCARD:
            resolved.append(template_part)
        elif template_part.startswith(_PLACEHOLDER_START):
            resolved.append(f"{_strip_wildcards(pattern_part)}{template_part}")
        else:
            resolved.append(pattern_part)

    return TOPIC_SEPARATOR.join(resolved)


def validate_topic(topic: str, template: str) -> bool:
    """Check that a concrete topic conforms to a template.

    Topics holding '*', '{' or '}' are never concrete and always fail.
    Placeholder levels accept any value, mixed levels such as 'v{major}'
    require the literal prefix, and '{any...}' accepts everything after it.

    Args:
        topic: Concrete topic, e.g. 'orders/US-WEST/created'
        template: Template chosen for the topic, e.g. 'orders/{region}/created'

    Returns:
        True if no level of the topic violates the template
    """
    if any(marker in topic for marker in (SINGLE_LEVEL_WILDCARD, _PLACEHOLDER_START, _PLACEHOLDER_END)):
        return False

    template_parts = split_topic(template)

    for i, topic_part in enumerate(split_topic(topic)):
        template_part = template_parts[i] if i < len(template_parts) else None

        if template_part is None:
            return False
        if topic_part == template_part:
            continue
        if template_part == ANY_REMAINING_PLACEHOLDER:
            return True
        if is_placeholder(template_part):
            continue
        if _PLACEHOLDER_START in template_part and not template_part.startswith(_PLACEHOLDER_START):
            literal_prefix = template_part[: template_part.index(_PLACEHOLDER_START)]
            if topic_part.startswith(literal_prefix):
                continue
        return False

    return True


def from_mqtt_pattern(pattern: str) -> str:
    """Convert an MQTT topic filter to the broker wildcard syntax.

    Only whole levels are converted: '+' becomes '*' and '#' becomes '>'.

    Example:
        from_mqtt_pattern('sensor/+/temp/#') -> 'sensor/*/temp/>'
    """
    converted = []
    for part in split_topic(pattern):
        if part == MQTT_SINGLE_LEVEL_WILDCARD:
            converted.append(SINGLE_LEVEL_WILDCARD)
        elif part == MQTT_MULTI_LEVEL_WILDCARD:
            converted.append(MULTI_LEVEL_WILDCARD)
        else:
            converted.append(part)
    return TOPIC_SEPARATOR.join(converted)
